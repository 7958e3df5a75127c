# clash_dash/luci_api/schemas.py
# Description: Pydantic models for the router target and LuCI JSON-RPC payloads
#
# Imports
from typing import List, Literal, Optional
#
# 3rd-party Libraries
from pydantic import BaseModel, Field
#
# Local Imports
from .exceptions import InvalidTarget
#
#######################################################################################################################
#
# Models:

class ServerTarget(BaseModel):
    """Router connection settings."""
    host: str
    port: Optional[str] = "80"
    use_ssl: bool = False
    username: Optional[str] = None
    password: Optional[str] = None

    def base_url(self) -> str:
        """
        Builds `scheme://host:port`.

        Raises:
            InvalidTarget: If the host is empty or not a bare host name, or
                the port is not a number between 1 and 65535.
        """
        host = self.host.strip()
        if not host or any(ch in host for ch in " /?#@") or "://" in host:
            raise InvalidTarget(f"Invalid router host: {self.host!r}")

        port = self.port or "80"
        if not port.isdigit() or not 0 < int(port) < 65536:
            raise InvalidTarget(f"Invalid router port: {self.port!r}")

        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{host}:{port}"

    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None


class RPCResponse(BaseModel):
    """Envelope returned by every LuCI RPC call."""
    result: Optional[str] = None
    error: Optional[str] = None


class LoginRequest(BaseModel):
    id: int = 1
    method: Literal["login"] = "login"
    params: List[str] = Field(default_factory=list)


class ExecRequest(BaseModel):
    method: Literal["exec"] = "exec"
    params: List[str] = Field(default_factory=list)

    @classmethod
    def for_command(cls, command: str) -> "ExecRequest":
        return cls(params=[command])

#
# End of schemas.py
#######################################################################################################################
