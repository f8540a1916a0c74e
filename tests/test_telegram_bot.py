import asyncio
import random
from types import SimpleNamespace
from typing import Any

from telegram.ext import CommandHandler, MessageHandler

from vocabtrainer.commands import HELP_TEXT, CommandDispatcher
from vocabtrainer.dictionary import DictionaryIndex
from vocabtrainer.service import QuizService
from vocabtrainer.telegram_bot import DISPATCHER_KEY, build_application, handle_message


class FakeMessage:
    def __init__(self, text: str | None, message_id: int = 10) -> None:
        self.text = text
        self.message_id = message_id
        self.replies: list[tuple[str, dict[str, Any]]] = []

    async def reply_text(self, text: str, **kwargs: Any) -> None:
        self.replies.append((text, kwargs))


def _dispatcher() -> CommandDispatcher:
    index = DictionaryIndex.build([("soba", "room"), ("kuća", "house")])
    return CommandDispatcher(QuizService(index, rng=random.Random(1)))


def _update(message: FakeMessage, user_id: int = 77, full_name: str = "Ana Petrović") -> Any:
    user = SimpleNamespace(id=user_id, full_name=full_name)
    return SimpleNamespace(message=message, effective_user=user)


def test_handle_message_replies_through_dispatcher() -> None:
    dispatcher = _dispatcher()
    context = SimpleNamespace(bot_data={DISPATCHER_KEY: dispatcher})
    message = FakeMessage("/help")

    asyncio.run(handle_message(_update(message), context))

    assert message.replies == [(HELP_TEXT, {"reply_to_message_id": 10})]
    profile = dispatcher.service.get_profile(77)
    assert profile is not None
    assert profile.name == "Ana Petrović"


def test_handle_message_runs_learning_round() -> None:
    dispatcher = _dispatcher()
    context = SimpleNamespace(bot_data={DISPATCHER_KEY: dispatcher})

    first = FakeMessage("/learn")
    asyncio.run(handle_message(_update(first), context))
    answer = dispatcher.service.store.snapshot().tasks[77][0]

    second = FakeMessage(answer)
    asyncio.run(handle_message(_update(second), context))
    assert second.replies[0][0].startswith("Correct 1/1")


def test_handle_message_ignores_updates_without_text() -> None:
    dispatcher = _dispatcher()
    context = SimpleNamespace(bot_data={DISPATCHER_KEY: dispatcher})
    message = FakeMessage(None)
    asyncio.run(handle_message(_update(message), context))
    assert message.replies == []
    assert dispatcher.service.get_profile(77) is None


def test_build_application_registers_handlers() -> None:
    dispatcher = _dispatcher()
    app = build_application("123456:TEST-TOKEN", dispatcher)
    assert app.bot_data[DISPATCHER_KEY] is dispatcher
    handlers = app.handlers[0]
    assert isinstance(handlers[0], CommandHandler)
    assert {"help", "start", "set", "learn", "rate"} <= set(handlers[0].commands)
    assert isinstance(handlers[1], MessageHandler)
