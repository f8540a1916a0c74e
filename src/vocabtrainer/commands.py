"""Transport-independent handling of chat messages."""

from __future__ import annotations

import logging

from .errors import InvalidTaskSizeError, NoOutstandingTaskError, TaskAlreadyOutstandingError
from .models import DEFAULT_TASK_SIZE, LEARNING_TASK_SIZE
from .quiz import format_task, split_answers
from .service import QuizService

logger = logging.getLogger(__name__)

HELP_COMMANDS = {"/help", "/start", "/старт"}
SET_COMMAND = "/set"
LEARN_COMMAND = "/learn"
RATE_COMMAND = "/rate"
KNOWN_COMMANDS = ("help", "start", "set", "learn", "rate")

HELP_TEXT = """\
This bot sends you a few words and expects their translations back.
Write each answer on its own line, in the same order as the questions.
Case and accents matter; surrounding punctuation is ignored.

Commands:
/help - show this message
/set N - put N words in each task
/learn - learning mode: one word at a time, a new word right after each answer (same as /set 1)
/rate - show your share of correct answers
Any other message asks for a task, or answers the task you already have."""


class CommandDispatcher:
    """Turn one inbound message into the reply text.

    Safe to call from several handlers at once: whether a message answers
    the current task or asks for a new one is decided by the store under its
    lock, never by a separate `has_outstanding_task` check.
    """

    def __init__(self, service: QuizService) -> None:
        self.service = service

    def handle(self, user_id: int, name: str, text: str) -> str:
        """Process a message from `user_id` and return the reply."""
        self.service.ensure_user(user_id, name)
        words = text.strip().split()
        command = words[0].split("@", 1)[0].lower() if words else ""

        if command in HELP_COMMANDS:
            return HELP_TEXT
        if command == SET_COMMAND:
            return self._set(user_id, words[1] if len(words) > 1 else None)
        if command == LEARN_COMMAND:
            return self._learn(user_id)
        if command == RATE_COMMAND:
            return self._rate(user_id)
        try:
            return self._answer(user_id, text)
        except NoOutstandingTaskError:
            return self._new_task(user_id)

    def _set(self, user_id: int, value: str | None) -> str:
        """Apply `/set N`; unusable input silently becomes the default size."""
        size = _parse_task_size(value)
        if size > self.service.dictionary_size:
            size = self.service.dictionary_size
        self.service.set_task_size(user_id, size)
        return f"Tasks will now contain {size} words."

    def _learn(self, user_id: int) -> str:
        self.service.set_task_size(user_id, LEARNING_TASK_SIZE)
        return self._new_task(user_id, busy_reply="Learning mode is on. Answer your current task to continue.")

    def _rate(self, user_id: int) -> str:
        rate = self.service.rate(user_id)
        if rate is None:
            return "You have not answered any words yet."
        return f"Your correct answer rate is {rate}%!"

    def _answer(self, user_id: int, text: str) -> str:
        reply = self.service.evaluate(user_id, split_answers(text))
        if self.service.is_learning_mode(user_id):
            reply += "\n\n" + self._new_task(user_id)
        return reply

    def _new_task(self, user_id: int, busy_reply: str = "Answer your current task first.") -> str:
        try:
            questions = self.service.generate(user_id, replace_existing=False)
        except TaskAlreadyOutstandingError:
            return busy_reply
        except InvalidTaskSizeError:
            logger.warning("Task size for user %s does not fit the dictionary", user_id)
            return (
                f"The dictionary only has {self.service.dictionary_size} words. "
                "Use /set N with a smaller N to get a task."
            )
        return format_task(questions)


def _parse_task_size(value: str | None) -> int:
    if value is None:
        return DEFAULT_TASK_SIZE
    try:
        size = int(value)
    except ValueError:
        return DEFAULT_TASK_SIZE
    return size if size >= 1 else DEFAULT_TASK_SIZE
