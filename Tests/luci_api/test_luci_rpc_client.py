"""
Unit tests for the LuCI RPC client.

Tests the LuCIRPCClient against an in-memory router served through httpx.MockTransport.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, patch

from clash_dash.luci_api.client import LuCIRPCClient
from clash_dash.luci_api.exceptions import InvalidTarget, ProtocolError, RemoteExecutionError, Unauthorized
from clash_dash.luci_api.schemas import ServerTarget


class TestLuCIRPCClient:
    """Test suite for LuCIRPCClient."""

    def test_client_initialization(self, rpc_client):
        assert rpc_client.base_url == "http://192.168.1.1:80"
        assert rpc_client.package == "openclash"
        assert rpc_client.timeout == 5.0
        assert rpc_client._client is None

    def test_defaults_come_from_config(self, server_target):
        client = LuCIRPCClient(server_target)
        assert client.package == "openclash"
        assert client.timeout == 30.0
        assert client.template_list_path == "/usr/share/openclash/res/sub_ini.list"

    def test_invalid_target_fails_before_any_request(self):
        with patch("httpx.AsyncClient") as mock_client_class:
            with pytest.raises(InvalidTarget):
                LuCIRPCClient(ServerTarget(host="", username="root", password="pw"))
            mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_returns_token(self, rpc_client, fake_router):
        token = await rpc_client.login()
        assert token == fake_router.TOKEN
        assert fake_router.logins == 1
        await rpc_client.close()

    @pytest.mark.asyncio
    async def test_login_without_credentials(self, fake_router):
        client = LuCIRPCClient(ServerTarget(host="192.168.1.1"), transport=fake_router.transport())
        with pytest.raises(Unauthorized):
            await client.login()
        assert fake_router.logins == 0

    @pytest.mark.asyncio
    async def test_login_rejected(self, rpc_client, fake_router):
        fake_router.reject_login = True
        with pytest.raises(Unauthorized):
            await rpc_client.login()

    @pytest.mark.asyncio
    async def test_login_http_error_status(self, server_target):
        transport = httpx.MockTransport(lambda request: httpx.Response(403))
        client = LuCIRPCClient(server_target, transport=transport)
        with pytest.raises(Unauthorized, match="403"):
            await client.login()

    @pytest.mark.asyncio
    async def test_login_connection_failure(self, server_target):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = LuCIRPCClient(server_target, transport=httpx.MockTransport(refuse))
        with pytest.raises(Unauthorized):
            await client.login()

    @pytest.mark.asyncio
    async def test_exec_logs_in_when_no_token(self, rpc_client, fake_router):
        output = await rpc_client.exec("uci show openclash")
        assert output == fake_router.dump
        assert fake_router.logins == 1
        assert fake_router.commands == ["uci show openclash"]

    @pytest.mark.asyncio
    async def test_exec_with_token_skips_login(self, rpc_client, fake_router):
        await rpc_client.exec("echo hi", token=fake_router.TOKEN)
        assert fake_router.logins == 0

    @pytest.mark.asyncio
    async def test_exec_non_200(self, rpc_client, fake_router):
        fake_router.exec_status = 500
        with pytest.raises(RemoteExecutionError) as exc_info:
            await rpc_client.exec("uci commit openclash", token=fake_router.TOKEN)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_exec_remote_error(self, rpc_client, fake_router):
        fake_router.exec_error = "uci: Invalid argument"
        with pytest.raises(RemoteExecutionError, match="Invalid argument"):
            await rpc_client.exec("uci set x", token=fake_router.TOKEN)

    @pytest.mark.asyncio
    async def test_exec_undecodable_body(self, rpc_client, fake_router):
        fake_router.raw_exec_body = b"<html>oops</html>"
        with pytest.raises(ProtocolError):
            await rpc_client.exec("uci show openclash", token=fake_router.TOKEN)

    @pytest.mark.asyncio
    async def test_commit(self, rpc_client, fake_router):
        await rpc_client.commit(fake_router.TOKEN)
        assert fake_router.commands == ["uci commit openclash"]

    @pytest.mark.asyncio
    async def test_fetch_subscription_dump_command(self, rpc_client, fake_router):
        await rpc_client.fetch_subscription_dump(fake_router.TOKEN)
        assert fake_router.commands == [
            "uci show openclash | grep \"config_subscribe\" | sed 's/openclash\\.//g' | sort"
        ]

    @pytest.mark.asyncio
    async def test_fetch_template_listing(self, rpc_client, fake_router):
        listing = await rpc_client.fetch_template_listing(fake_router.TOKEN)
        assert listing == fake_router.templates
        assert fake_router.commands == ["cat /usr/share/openclash/res/sub_ini.list | cut -d',' -f1"]

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, server_target, fake_router):
        async with LuCIRPCClient(server_target, transport=fake_router.transport()) as client:
            await client.login()
            assert client._client is not None
        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_without_client(self, rpc_client):
        rpc_client._client = None
        await rpc_client.close()

    @pytest.mark.asyncio
    async def test_close_closes_http_client(self, rpc_client):
        mock_http = AsyncMock()
        rpc_client._client = mock_http
        await rpc_client.close()
        mock_http.aclose.assert_awaited_once()
        assert rpc_client._client is None
