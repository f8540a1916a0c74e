"""CLI entrypoint for the vocabulary drilling bot."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable

from .commands import CommandDispatcher
from .config import Settings, load_settings
from .dictionary_loader import load_dictionary
from .persistence import PersistenceScheduler, load_state
from .service import QuizService
from .store import UserRecordStore
from .telegram_bot import run_bot

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
EXIT_COMMANDS = {":q", ":quit", ":exit"}
CONSOLE_USER_ID = 0
CONSOLE_USER_NAME = "console"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabtrainer", description="Vocabulary drilling bot")
    parser.add_argument("command", nargs="?", default="serve", choices=["serve", "play"])
    parser.add_argument("--dictionary", help="dictionary file (.csv, .tsv, .json, .xlsx)")
    parser.add_argument("--state", help="JSON file holding user state")
    parser.add_argument("--interval", help="how often user state is saved, e.g. 30s, 5m")
    parser.add_argument("--log-level", help="logging level, e.g. DEBUG, INFO")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    args = _parser().parse_args(argv)
    try:
        settings = load_settings().with_overrides(
            dictionary_path=args.dictionary,
            state_path=args.state,
            save_interval=args.interval,
            log_level=args.log_level,
        )
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("Invalid configuration: %s", exc)
        return 2
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve" and not settings.telegram_token:
        logger.error("TELEGRAM_TOKEN is not set.")
        return 2

    try:
        service = build_service(settings)
    except (OSError, ValueError) as exc:
        logger.error("Could not load dictionary %s: %s", settings.dictionary_path, exc)
        return 1

    scheduler = PersistenceScheduler(service.store, settings.state_path, settings.save_interval)
    scheduler.start()
    try:
        dispatcher = CommandDispatcher(service)
        if args.command == "play":
            return play_shell(dispatcher)
        run_bot(settings.telegram_token or "", dispatcher)
        return 0
    finally:
        scheduler.stop(flush=True)


def build_service(settings: Settings) -> QuizService:
    """Load the dictionary and restore saved users."""
    index = load_dictionary(settings.dictionary_path)
    store = UserRecordStore(index)
    store.restore(load_state(settings.state_path))
    return QuizService(index, store)


def play_shell(dispatcher: CommandDispatcher, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Drive the bot from the terminal as a single local user."""
    print_fn("=== Vocabulary Practice ===")
    print_fn("Type /help for commands. Finish multi-word answers with an empty line. :q quits.")
    print_fn(dispatcher.handle(CONSOLE_USER_ID, CONSOLE_USER_NAME, "/start"))
    while True:
        try:
            text = _read_message(input_fn)
        except (EOFError, KeyboardInterrupt):
            return 0
        if text is None:
            return 0
        if not text:
            continue
        print_fn(dispatcher.handle(CONSOLE_USER_ID, CONSOLE_USER_NAME, text))


def _read_message(input_fn: InputFn) -> str | None:
    """Read lines until an empty one; commands are sent immediately."""
    lines: list[str] = []
    while True:
        line = input_fn("> " if not lines else "  ").strip()
        if not lines and line.lower() in EXIT_COMMANDS:
            return None
        if not lines and line.startswith("/"):
            return line
        if not line:
            return "\n".join(lines)
        lines.append(line)


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
