# Tests/luci_api/test_envelope_and_schemas.py
"""
Tests for RPC envelope decoding and the router target model.
"""

import json

import pytest

from clash_dash.luci_api.exceptions import InvalidTarget, ProtocolError, RemoteExecutionError
from clash_dash.luci_api.schemas import ExecRequest, LoginRequest, ServerTarget
from clash_dash.luci_api.utils import decode_envelope, parse_envelope


class TestDecodeEnvelope:

    def test_result_is_returned(self):
        payload = json.dumps({"id": None, "result": "line1\nline2", "error": None})
        assert decode_envelope(payload) == "line1\nline2"

    def test_bytes_payload(self):
        assert decode_envelope(b'{"result": "ok"}') == "ok"

    def test_missing_result_is_empty(self):
        assert decode_envelope('{"result": null, "error": null}') == ""

    def test_empty_error_is_not_a_failure(self):
        assert decode_envelope('{"result": "ok", "error": ""}') == "ok"

    def test_error_raises_remote_execution_error(self):
        with pytest.raises(RemoteExecutionError) as exc_info:
            decode_envelope('{"result": "", "error": "uci: Entry not found"}')
        assert exc_info.value.remote_error == "uci: Entry not found"

    @pytest.mark.parametrize("payload", [
        "",
        "<html>502 Bad Gateway</html>",
        "[1, 2, 3]",
        '{"result": 42}',
    ])
    def test_undecodable_payload_raises_protocol_error(self, payload):
        with pytest.raises(ProtocolError):
            decode_envelope(payload)

    def test_parse_envelope_keeps_error(self):
        envelope = parse_envelope('{"result": "x", "error": "boom"}')
        assert envelope.result == "x"
        assert envelope.error == "boom"


class TestServerTarget:

    def test_http_url(self):
        target = ServerTarget(host="192.168.1.1", port="8080")
        assert target.base_url() == "http://192.168.1.1:8080"

    def test_https_url(self):
        target = ServerTarget(host="router.lan", port="443", use_ssl=True)
        assert target.base_url() == "https://router.lan:443"

    def test_missing_port_defaults_to_80(self):
        assert ServerTarget(host="router.lan", port=None).base_url() == "http://router.lan:80"

    @pytest.mark.parametrize("host,port", [
        ("", "80"),
        ("   ", "80"),
        ("http://router.lan", "80"),
        ("router lan", "80"),
        ("router.lan/cgi-bin", "80"),
        ("router.lan", "http"),
        ("router.lan", "0"),
        ("router.lan", "70000"),
    ])
    def test_invalid_targets(self, host, port):
        with pytest.raises(InvalidTarget):
            ServerTarget(host=host, port=port).base_url()

    def test_credentials(self):
        assert ServerTarget(host="r", username="root", password="pw").has_credentials()
        assert not ServerTarget(host="r", username="root").has_credentials()


class TestRequestModels:

    def test_login_request(self):
        body = LoginRequest(params=["root", "pw"]).model_dump()
        assert body == {"id": 1, "method": "login", "params": ["root", "pw"]}

    def test_exec_request(self):
        body = ExecRequest.for_command("uci commit openclash").model_dump()
        assert body == {"method": "exec", "params": ["uci commit openclash"]}
