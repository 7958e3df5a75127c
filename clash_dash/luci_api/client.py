# clash_dash/luci_api/client.py
# Description: Async client for the LuCI JSON-RPC endpoints of an OpenWrt router
#
# Two endpoints are used:
#   /cgi-bin/luci/rpc/auth           login -> session token
#   /cgi-bin/luci/rpc/sys?auth=TOKEN exec  -> runs one shell command
#
# Imports
from __future__ import annotations
from typing import Optional, Dict, Any
#
# Third-Party Imports
import httpx
from loguru import logger
#
# Local Imports
from ..config import get_cli_setting
from ..Subscriptions.diff_engine import build_commit_command
from ..Utils.log_sanitizer import sanitize_string
from .exceptions import RemoteExecutionError, Unauthorized
from .schemas import ExecRequest, LoginRequest, ServerTarget
from .utils import decode_envelope, parse_envelope

logger = logger.bind(module="luci_rpc_client")

AUTH_PATH = "/cgi-bin/luci/rpc/auth"
SYS_PATH = "/cgi-bin/luci/rpc/sys"


class LuCIRPCClient:
    """Client for running shell commands on the router through LuCI RPC."""

    def __init__(
        self,
        target: ServerTarget,
        timeout: Optional[float] = None,
        package: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            target: Router address and credentials
            timeout: Request timeout in seconds, defaults to [openwrt] request_timeout
            package: UCI package holding the subscriptions, defaults to [openwrt] uci_package
            transport: Optional httpx transport, used by tests

        Raises:
            InvalidTarget: If the target cannot form a URL. Checked before any request.
        """
        self.target = target
        self.base_url = target.base_url()
        self.timeout = timeout if timeout is not None else get_cli_setting("openwrt", "request_timeout", 30.0)
        self.package = package or get_cli_setting("openwrt", "uci_package", "openclash")
        self.template_list_path = get_cli_setting(
            "subscriptions", "template_list_path", "/usr/share/openclash/res/sub_ini.list"
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(f"LuCI RPC client initialized for {self.base_url} (package: {self.package})")

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "LuCIRPCClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _post(self, url: str, body: Dict[str, Any], cookies: Optional[Dict[str, str]] = None) -> httpx.Response:
        logger.debug(f"POST {sanitize_string(url)}")
        headers = None
        if cookies:
            headers = {"Cookie": "; ".join(f"{k}={v}" for k, v in cookies.items())}
        try:
            return await self.client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise RemoteExecutionError(f"Request to {sanitize_string(url)} failed: {e}") from e

    async def login(self) -> str:
        """Logs in and returns the session token.

        Raises:
            Unauthorized: Missing credentials, non-200 status, or no token in the response
            ProtocolError: If the login response cannot be decoded
        """
        if not self.target.has_credentials():
            raise Unauthorized("Router username or password is not configured")

        body = LoginRequest(params=[self.target.username, self.target.password]).model_dump()
        try:
            response = await self._post(AUTH_PATH, body)
        except RemoteExecutionError as e:
            raise Unauthorized(f"Login request failed: {e}") from e

        if response.status_code != 200:
            raise Unauthorized(f"Login rejected with HTTP {response.status_code}")

        envelope = parse_envelope(response.content)
        if not envelope.result:
            raise Unauthorized("Login rejected: no session token returned")

        logger.debug("Obtained LuCI session token")
        return envelope.result

    async def exec(self, command: str, token: Optional[str] = None) -> str:
        """Runs a shell command on the router and returns its output.

        Args:
            command: The shell command line
            token: Session token; a fresh login is made when omitted

        Raises:
            Unauthorized: If a login was needed and failed
            RemoteExecutionError: On non-200 status or a non-empty remote error
            ProtocolError: If the response envelope cannot be decoded
        """
        if token is None:
            token = await self.login()

        url = f"{SYS_PATH}?auth={token}"
        response = await self._post(url, ExecRequest.for_command(command).model_dump(), cookies={"sysauth": token})

        if response.status_code != 200:
            logger.error(f"Router returned HTTP {response.status_code} for exec")
            raise RemoteExecutionError(
                f"Remote exec failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return decode_envelope(response.content)

    async def commit(self, token: Optional[str] = None) -> None:
        """Persists pending UCI changes of the package."""
        await self.exec(build_commit_command(self.package), token)
        logger.info(f"Committed UCI package '{self.package}'")

    async def fetch_subscription_dump(self, token: Optional[str] = None) -> str:
        """Returns the sorted `uci show` lines of every config_subscribe section."""
        command = (
            f"uci show {self.package} | grep \"config_subscribe\" "
            f"| sed 's/{self.package}\\.//g' | sort"
        )
        return await self.exec(command, token)

    async def fetch_template_listing(self, token: Optional[str] = None) -> str:
        """Returns the names of the subscription conversion templates, one per line."""
        return await self.exec(f"cat {self.template_list_path} | cut -d',' -f1", token)

#
# End of client.py
#######################################################################################################################
