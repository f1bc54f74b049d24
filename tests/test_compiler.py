"""Tests for the compile service client (with mocked HTTP)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from wiresim.config import CompileConfig
from wiresim.exceptions import CompileError
from wiresim.simulation import CompileClient, CompileResult


def _response(data):
    mock_resp = MagicMock()
    mock_resp.json.return_value = data
    mock_resp.raise_for_status = MagicMock()
    return mock_resp


class TestCompileResult:
    """Tests for CompileResult."""

    def test_program(self):
        assert CompileResult(success=True, hex=":00000001FF").program == ":00000001FF"
        assert CompileResult(success=True).program is None

    def test_diagnostics_prefers_stderr(self):
        assert CompileResult(success=False, stdout="out", stderr="err").diagnostics == "err"
        assert CompileResult(success=False, stdout="out").diagnostics == "out"

    def test_to_dict(self):
        data = CompileResult(success=True, hex="x", board="uno").to_dict()
        assert data == {"success": True, "board": "uno", "hex": "x", "stdout": "", "stderr": ""}


class TestCompileClient:
    """Tests for CompileClient."""

    def test_initialization_defaults(self):
        client = CompileClient()
        assert client.url == "http://localhost:9000/compile"
        assert client.config.timeout == 30.0
        assert client._session is None

    def test_url_strips_trailing_slash(self):
        client = CompileClient(CompileConfig(url="http://build.local:8080/"))
        assert client.url == "http://build.local:8080/compile"

    def test_compile_success(self, program_hex):
        """Posts the sketch and returns the program image."""
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_session.return_value.post.return_value = _response(
                {"success": True, "hex": program_hex, "stdout": "ok", "stderr": ""}
            )

            client = CompileClient()
            result = client.compile("void setup() {}\nvoid loop() {}\n")

            assert result.success is True
            assert result.program == program_hex
            assert result.board == "uno"

            _, kwargs = mock_session.return_value.post.call_args
            assert kwargs["json"] == {
                "sourceText": "void setup() {}\nvoid loop() {}\n",
                "boardId": "uno",
            }
            assert kwargs["timeout"] == 30.0

    def test_compile_board_override(self):
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_session.return_value.post.return_value = _response({"success": True, "hex": ""})

            result = CompileClient().compile("src", board_id="mega")

            assert result.board == "mega"
            _, kwargs = mock_session.return_value.post.call_args
            assert kwargs["json"]["boardId"] == "mega"

    def test_compile_failure_is_a_result(self):
        """A sketch that does not build is reported, not raised."""
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_session.return_value.post.return_value = _response(
                {"success": False, "hex": "", "stdout": "", "stderr": "expected ';'"}
            )

            result = CompileClient().compile("void loop() {")

            assert result.success is False
            assert result.program is None
            assert "expected ';'" in result.diagnostics

    def test_connection_error(self):
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_session.return_value.post.side_effect = requests.ConnectionError("refused")

            with pytest.raises(CompileError, match="request failed") as exc_info:
                CompileClient().compile("src")

            assert exc_info.value.context["url"] == "http://localhost:9000/compile"
            assert "refused" in exc_info.value.context["reason"]
            assert exc_info.value.suggestions

    def test_http_error(self):
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_resp = MagicMock()
            mock_resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
            mock_session.return_value.post.return_value = mock_resp

            with pytest.raises(CompileError, match="request failed"):
                CompileClient().compile("src")

    def test_invalid_json(self):
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_resp = MagicMock()
            mock_resp.json.side_effect = ValueError("No JSON object could be decoded")
            mock_resp.raise_for_status = MagicMock()
            mock_session.return_value.post.return_value = mock_resp

            with pytest.raises(CompileError, match="invalid JSON"):
                CompileClient().compile("src")

    @pytest.mark.parametrize("data", [[], {"hex": ":00000001FF"}, "ok"])
    def test_unexpected_response(self, data):
        with patch("wiresim.simulation.compiler.CompileClient._get_session") as mock_session:
            mock_session.return_value.post.return_value = _response(data)

            with pytest.raises(CompileError, match="Unexpected compile service response"):
                CompileClient().compile("src")

    def test_session_created_lazily(self):
        with patch("requests.Session") as mock_session_cls:
            mock_session = MagicMock()
            mock_session_cls.return_value = mock_session

            client = CompileClient()
            assert client._get_session() is mock_session
            assert client._get_session() is mock_session
            mock_session_cls.assert_called_once()
            mock_session.headers.update.assert_called_once_with(CompileClient.DEFAULT_HEADERS)

    def test_close(self):
        session = MagicMock()
        client = CompileClient(session=session)
        client.close()
        session.close.assert_called_once()
        assert client._session is None
