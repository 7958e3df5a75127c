# clash_dash/luci_api/utils.py
#
#
# Imports
from typing import Union
#
# 3rd-party Libraries
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from .exceptions import ProtocolError, RemoteExecutionError
from .schemas import RPCResponse
#
#######################################################################################################################
#
# Functions:

logger = logger.bind(module="luci_api.utils")


def parse_envelope(payload: Union[bytes, str]) -> RPCResponse:
    """
    Decodes a raw RPC response body.

    Raises:
        ProtocolError: If the body is not JSON or does not have the envelope shape.
    """
    try:
        return RPCResponse.model_validate_json(payload)
    except ValidationError as e:
        logger.error(f"Undecodable RPC response: {e}")
        raise ProtocolError(f"Could not decode RPC response: {e}") from e


def decode_envelope(payload: Union[bytes, str]) -> str:
    """
    Decodes an exec response and returns its command output.

    Args:
        payload: The raw response body.

    Returns:
        The `result` text, or an empty string when the router sent none.

    Raises:
        ProtocolError: If the envelope cannot be decoded.
        RemoteExecutionError: If the envelope carries a non-empty `error`.
    """
    envelope = parse_envelope(payload)
    if envelope.error:
        logger.error(f"Remote command failed: {envelope.error}")
        raise RemoteExecutionError(f"Remote command failed: {envelope.error}", remote_error=envelope.error)
    return envelope.result or ""

#
# End of utils.py
#######################################################################################################################
