"""
Tests for the dify-stream command-line entry point.
"""

import httpx
import pytest

from conftest import ScriptedByteStream, frame
from dify_stream import main as cli
from dify_stream.client import DifyClient
from dify_stream.config import API_KEY_ENV


def patch_transport(monkeypatch, handler):
    """Route clients built from configuration through a mock transport."""
    original = DifyClient.from_config.__func__

    def from_config(cls, configuration, **kwargs):
        return original(cls, configuration, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(DifyClient, "from_config", classmethod(from_config))


class TestCli:
    """Test argument parsing and answer streaming."""

    def test_parse_args(self):
        args = cli.parse_args(["hello", "--conversation-id", "c1"])
        assert args.query == "hello"
        assert args.conversation_id == "c1"
        assert args.config is None

    @pytest.mark.asyncio
    async def test_streams_answer(self, monkeypatch, capsys):
        monkeypatch.setenv(API_KEY_ENV, "app-123")

        async def handler(request):
            return httpx.Response(200, stream=ScriptedByteStream([
                frame('{"event":"message","answer":"Hel"}'),
                frame('{"event":"message","answer":"lo"}'),
                frame('{"event":"message_end"}'),
            ]))

        patch_transport(monkeypatch, handler)

        exit_code = await cli.run(cli.parse_args(["hi"]))

        assert exit_code == 0
        assert capsys.readouterr().out == "Hello\n"

    @pytest.mark.asyncio
    async def test_reports_stream_error(self, monkeypatch, capsys):
        monkeypatch.setenv(API_KEY_ENV, "app-123")

        async def handler(request):
            return httpx.Response(200, stream=ScriptedByteStream([
                frame('{"event":"error","message":"quota exceeded"}'),
            ]))

        patch_transport(monkeypatch, handler)

        exit_code = await cli.run(cli.parse_args(["hi"]))

        assert exit_code == 1
        assert "quota exceeded" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_reports_transport_error(self, monkeypatch, capsys):
        monkeypatch.setenv(API_KEY_ENV, "app-123")

        def handler(request):
            return httpx.Response(401, json={"code": "unauthorized"})

        patch_transport(monkeypatch, handler)

        exit_code = await cli.run(cli.parse_args(["hi"]))

        assert exit_code == 1
        assert "401" in capsys.readouterr().err
