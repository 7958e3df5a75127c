# luci_api - LuCI JSON-RPC access to the router
#
# The client itself lives in `clash_dash.luci_api.client`; it reads its
# defaults from `clash_dash.config`, which depends on the schemas here.

from .exceptions import LuCIAPIError, InvalidTarget, Unauthorized, ProtocolError, RemoteExecutionError
from .schemas import ServerTarget, RPCResponse

__all__ = [
    'LuCIAPIError',
    'InvalidTarget',
    'Unauthorized',
    'ProtocolError',
    'RemoteExecutionError',
    'ServerTarget',
    'RPCResponse',
]
