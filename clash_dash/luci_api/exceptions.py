# clash_dash/luci_api/exceptions.py
#
#
# Imports
from typing import Optional
#
#######################################################################################################################
#
# Exceptions:

class LuCIAPIError(Exception):
    """Base exception for errors talking to the router's LuCI RPC endpoints."""
    pass


class InvalidTarget(LuCIAPIError):
    """The configured router address cannot form a valid URL."""
    pass


class Unauthorized(LuCIAPIError):
    """Credentials are missing or the router rejected the login."""
    pass


class ProtocolError(LuCIAPIError):
    """The response body is not a decodable RPC envelope."""
    pass


class RemoteExecutionError(LuCIAPIError):
    """The command failed remotely: non-success HTTP status or a non-empty `error` in the envelope."""

    def __init__(self, message: str, status_code: Optional[int] = None, remote_error: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.remote_error = remote_error

#
# End of exceptions.py
#######################################################################################################################
