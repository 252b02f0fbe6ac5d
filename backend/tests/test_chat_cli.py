"""
Tests for the terminal client commands.
"""

import asyncio
from unittest.mock import AsyncMock, patch

from chat_cli import _handle_command, _print_reply, build_parser, run
from services.models import CTAButton


class TestParser:
    def test_flags(self):
        args = build_parser().parse_args(["--offline", "--simulate", "--api-url", "http://x/api"])
        assert args.offline is True
        assert args.simulate is True
        assert args.api_url == "http://x/api"
        assert args.debug is False


class TestCommands:
    def test_quit_stops_loop(self, manager):
        assert asyncio.run(_handle_command(manager, "/quit")) is False

    def test_mock_toggle(self, manager, capsys):
        asyncio.run(_handle_command(manager, "/mock on"))
        assert asyncio.run(manager.is_simulated_mode_enabled()) is True
        asyncio.run(_handle_command(manager, "/mock off"))
        assert asyncio.run(manager.is_simulated_mode_enabled()) is False
        assert "simulated mode: False" in capsys.readouterr().out

    def test_clear_reports_warning(self, make_manager, capsys):
        offline = make_manager(offline=True)
        assert asyncio.run(_handle_command(offline, "/clear")) is True
        assert "Session cleared locally only" in capsys.readouterr().out

    def test_cta_out_of_range(self, manager, capsys):
        asyncio.run(_handle_command(manager, "/cta 3"))
        assert "choose a button between 1 and 0" in capsys.readouterr().out

    def test_cta_sends_button(self, dispatcher, make_manager):
        dispatcher.reply = {"response": "Pick one", "CTAResponse": [{"cta": [{"name": "Docs", "value": "docs"}]}]}
        manager = make_manager(dispatcher)
        asyncio.run(manager.send_message("help"))
        asyncio.run(_handle_command(manager, "/cta 1"))
        assert dispatcher.cta_calls[0][0] == CTAButton(label="Docs", value="docs")


class TestPrintReply:
    def test_prints_segments_and_buttons(self, dispatcher, make_manager, capsys):
        dispatcher.reply = "First|Second"
        manager = make_manager(dispatcher)
        manager.subscribe(_print_reply)
        asyncio.run(manager.send_message("hi"))
        out = capsys.readouterr().out
        assert "assistant> First" in out
        assert "assistant> Second" in out
        assert "you>" not in out

    def test_ignores_user_messages(self, manager, capsys):
        manager.subscribe(_print_reply)
        asyncio.run(manager.send_message("hi"))
        lines = [l for l in capsys.readouterr().out.splitlines() if "assistant>" in l]
        assert lines == ["  assistant> Hello there!"]


class TestRun:
    """Whole terminal session against an offline manager."""

    def test_closes_stores_on_exit(self, capsys):
        args = build_parser().parse_args(["--offline"])
        with patch("builtins.input", side_effect=EOFError), \
                patch("chat_cli.close_stores", new_callable=AsyncMock) as close:
            assert asyncio.run(run(args)) == 0
        close.assert_awaited_once()
        assert "== " in capsys.readouterr().out

    def test_closes_stores_after_quit(self):
        args = build_parser().parse_args(["--offline"])
        with patch("builtins.input", side_effect=["", "/quit"]), \
                patch("chat_cli.close_stores", new_callable=AsyncMock) as close:
            assert asyncio.run(run(args)) == 0
        close.assert_awaited_once()
