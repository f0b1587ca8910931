#!/usr/bin/env python3
"""
qabot chat CLI – talk to the dialogue engine in-process.

Usage:
  python -m qabot.scripts.chat_cli [--kb data.xml] [--session cli]

Env: QABOT_KB_PATH (knowledge base), LOG_LEVEL, LOG_DIR.
Commands inside the chat:
  /reset    forget the current session (context and history)
  /history  show the turns of the current session
  /stats    knowledge base counts
  /quit     leave (also: exit, quit, empty line)
"""
from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from qabot.config import load_app_config
from qabot.core.exceptions import ChatbotError
from qabot.core.logger import LoggerConfig, configure, get_logger
from qabot.dialogue.engine import DialogueEngine
from qabot.dialogue.types import DialogueResult
from qabot.services import DialogueService

# Swappable for tests
_input_fn = input
_print_fn = print
_default_input_fn = input
_default_print_fn = print

EXIT_WORDS = ("/quit", "exit", "quit")


def _set_io(input_fn=None, print_fn=None) -> None:
    """Inject I/O for tests. None leaves the current function in place."""
    global _input_fn, _print_fn
    if input_fn is not None:
        _input_fn = input_fn
    if print_fn is not None:
        _print_fn = print_fn


def _reset_io() -> None:
    global _input_fn, _print_fn
    _input_fn = _default_input_fn
    _print_fn = _default_print_fn


def _out(msg: str = "") -> None:
    _print_fn(msg)


def format_result(result: DialogueResult) -> List[str]:
    """Lines shown for one answered turn."""
    lines = [f"  Bot: {result.answer}"]
    meta = [f"source={result.source.value}", f"lang={result.language}"]
    if result.intent is not None:
        meta.append(f"intent={result.intent}")
    if result.score is not None:
        meta.append(f"score={result.score:.4f}")
    if result.context is not None:
        meta.append(f"context={result.context}")
    if result.entities:
        meta.append("entities=" + ",".join(f"{k}:{v}" for k, v in sorted(result.entities.items())))
    lines.append("       (" + " ".join(meta) + ")")
    return lines


def _show_history(engine: DialogueEngine, session_id: str) -> None:
    session = engine.sessions.get(session_id)
    if session is None or not session.history:
        _out("  (no history)")
        return
    for n, turn in enumerate(session.history, 1):
        _out(f"  {n:>3}. you: {turn.user}")
        _out(f"       bot: {turn.bot}")
    if session.context_id:
        _out(f"  active context: {session.context_id}")


async def chat_loop(engine: DialogueEngine, session_id: str) -> int:
    """Read utterances until an exit word; returns the number of answered turns."""
    _out("  Chat started. Type /quit to leave, /help for commands.\n")
    turns = 0
    while True:
        try:
            q = _input_fn("  You: ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not q or q.lower() in EXIT_WORDS:
            break
        if q == "/help":
            _out(__doc__.split("Commands inside the chat:")[1].rstrip())
            continue
        if q == "/reset":
            engine.sessions.drop(session_id)
            _out("  Session reset.")
            continue
        if q == "/history":
            _show_history(engine, session_id)
            continue
        if q == "/stats":
            for key, value in engine.knowledge_base.stats().items():
                _out(f"  {key:<10} {value}")
            continue

        try:
            result = await engine.respond(q, session_id)
        except ChatbotError as exc:
            _out(f"  Error: {exc.message} ({exc.code})")
            continue
        for line in format_result(result):
            _out(line)
        _out()
        turns += 1

    _out("  Chat ended.\n")
    return turns


def _setup_logging() -> LoggerConfig:
    # Keep the console quiet unless LOG_LEVEL asks otherwise; the chat owns stdout.
    config = LoggerConfig.from_env()
    if "LOG_LEVEL" not in os.environ:
        config = config.with_overrides(level="WARNING")
    configure(config)
    get_logger(__name__).debug("CLI logging configured (%s)", config.level)
    return config


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat with a qabot knowledge base.")
    parser.add_argument("--kb", help="knowledge base file (.xml or .json); defaults to QABOT_KB_PATH")
    parser.add_argument("--session", default="cli", help="session id to use (default: cli)")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    _setup_logging()

    overrides = {"kb_path": args.kb} if args.kb else {}
    try:
        config = load_app_config(**overrides)
    except ChatbotError as exc:
        _out(f"Config error: {exc.message}")
        return 1

    async with httpx.AsyncClient() as client:
        try:
            engine = DialogueService.build(config, http_client=client)
        except ChatbotError as exc:
            _out(f"Could not load knowledge base {Path(config.kb_path)}: {exc.message}")
            for err in (exc.details or {}).get("errors", [])[:5]:
                loc = ".".join(str(part) for part in err.get("loc", ()))
                _out(f"  - {loc}: {err.get('msg')}")
            return 1

        stats = engine.knowledge_base.stats()
        _out(f"  ▸ qabot: {stats['qa_items']} Q&A items, {stats['contexts']} contexts, "
             f"{stats['languages']} language(s)")
        await chat_loop(engine, args.session)
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
