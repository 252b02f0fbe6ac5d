#!/usr/bin/env python3
"""
ChatDesk terminal client.

Drives a ChatSessionManager from the terminal: each reply segment is
printed as its own bubble, followed by the reply's buttons and video links.

Commands:
    /clear          clear the session
    /info           show session info
    /mock on|off    toggle simulated mode
    /cta N          click button N of the last reply
    /quit           exit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from config import get_config
from errors import ChatDeskError, format_error_for_user
from logging_config import setup_logging
from services.chat_session import ChatSessionManager
from services.kv_store import close_stores
from services.models import ChatEvent, CTAButton


def _print_reply(event: ChatEvent) -> None:
    if event.kind != "messages" or not event.messages:
        return
    message = event.messages[-1]
    if message.is_from_user or message.response is None:
        return

    for segment in message.segments or [message.text]:
        print(f"  assistant> {segment}")
    index = 1
    for group in message.response.actions:
        for button in group.cta:
            print(f"    [{index}] {button.label} ({button.value})")
            index += 1
        for video in group.video_links:
            print(f"    [video] {video.label}: {video.url}")


def _buttons(manager: ChatSessionManager) -> list[CTAButton]:
    for message in reversed(manager.messages):
        if message.response is not None:
            return [b for g in message.response.actions for b in g.cta]
    return []


async def _handle_command(manager: ChatSessionManager, line: str) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    command, _, arg = line.partition(" ")
    arg = arg.strip()

    if command == "/quit":
        return False
    if command == "/clear":
        result = await manager.clear_session()
        print(f"  session cleared{' (' + result['warning'] + ')' if 'warning' in result else ''}")
    elif command == "/info":
        print(f"  {await manager.get_session_info()}")
    elif command == "/mock":
        if arg == "on":
            await manager.enable_simulated_mode()
        elif arg == "off":
            await manager.disable_simulated_mode()
        print(f"  simulated mode: {await manager.is_simulated_mode_enabled()}")
    elif command == "/cta":
        buttons = _buttons(manager)
        if not arg.isdigit() or not 1 <= int(arg) <= len(buttons):
            print(f"  choose a button between 1 and {len(buttons)}")
        else:
            try:
                await manager.handle_cta_action(buttons[int(arg) - 1])
                print("  action sent")
            except ChatDeskError as e:
                print(f"  {format_error_for_user(e)}")
    else:
        print(f"  unknown command: {command}")
    return True


async def run(args: argparse.Namespace) -> int:
    config = get_config()
    if args.api_url:
        config.update(api_url=args.api_url)
    config.load_ui_config(args.ui_config)

    manager = await ChatSessionManager.create(offline=args.offline)
    manager.subscribe(_print_reply)
    if args.simulate:
        await manager.enable_simulated_mode()

    print(f"== {config.header_text} ==")
    for line in config.welcome_messages:
        print(f"  assistant> {line}")

    try:
        while True:
            try:
                line = (await asyncio.to_thread(input, "you> ")).strip()
            except EOFError:
                break
            if not line:
                continue
            if line.startswith("/"):
                if not await _handle_command(manager, line):
                    break
                continue
            await manager.send_message(line)
    finally:
        await manager.aclose()
        await close_stores()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ChatDesk terminal client")
    parser.add_argument("--api-url", help="Override the chat backend base URL")
    parser.add_argument("--ui-config", help="Path to the UI config JSON (chatHeader, welcomeMessages)")
    parser.add_argument("--simulate", action="store_true", help="Enable simulated replies when the backend fails")
    parser.add_argument("--offline", action="store_true", help="Do not contact a backend at all")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.WARNING)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
