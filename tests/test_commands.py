import random
import threading

from vocabtrainer.commands import HELP_TEXT, CommandDispatcher
from vocabtrainer.dictionary import DictionaryIndex
from vocabtrainer.service import QuizService


def _dispatcher(words: list[tuple[str, str]] | None = None) -> CommandDispatcher:
    index = DictionaryIndex.build(words or [("soba", "room"), ("Sneško Belić", "snowman"), ("kuća", "house")])
    return CommandDispatcher(QuizService(index, rng=random.Random(9)))


def _expected_answers(dispatcher: CommandDispatcher, user_id: int) -> list[str]:
    return list(dispatcher.service.store.snapshot().tasks[user_id])


def test_help_and_start_return_help_text() -> None:
    dispatcher = _dispatcher()
    assert dispatcher.handle(1, "ana", "/help") == HELP_TEXT
    assert dispatcher.handle(1, "ana", "/start") == HELP_TEXT
    assert dispatcher.handle(1, "ana", "/help@vocab_bot") == HELP_TEXT
    assert dispatcher.service.get_profile(1) is not None


def test_first_message_issues_task_then_next_message_answers_it() -> None:
    dispatcher = _dispatcher()
    dispatcher.handle(1, "ana", "/set 2")
    reply = dispatcher.handle(1, "ana", "hello")
    assert reply.startswith("Translate 2 words")
    assert dispatcher.service.has_outstanding_task(1) is True

    answers = _expected_answers(dispatcher, 1)
    reply = dispatcher.handle(1, "ana", "\n".join(answers))
    assert reply == "Correct 2/2"
    assert dispatcher.service.has_outstanding_task(1) is False


def test_set_falls_back_to_default_on_invalid_input() -> None:
    words = [(f"src{i}", f"tgt{i}") for i in range(20)]
    dispatcher = _dispatcher(words)
    for text in ["/set abc", "/set", "/set 0", "/set -3"]:
        dispatcher.handle(1, "ana", "/set 4")
        assert dispatcher.handle(1, "ana", text) == "Tasks will now contain 10 words."
        profile = dispatcher.service.get_profile(1)
        assert profile is not None
        assert profile.task_size == 10


def test_set_larger_than_dictionary_is_capped() -> None:
    dispatcher = _dispatcher()
    assert dispatcher.handle(1, "ana", "/set 50") == "Tasks will now contain 3 words."


def test_default_task_size_larger_than_dictionary_is_reported() -> None:
    dispatcher = _dispatcher()
    reply = dispatcher.handle(1, "ana", "give me words")
    assert "only has 3 words" in reply
    assert dispatcher.service.has_outstanding_task(1) is False


def test_learn_chains_single_word_tasks() -> None:
    dispatcher = _dispatcher()
    reply = dispatcher.handle(1, "ana", "/learn")
    assert reply.startswith("Translate 1 words")
    assert dispatcher.service.is_learning_mode(1) is True

    answer = _expected_answers(dispatcher, 1)[0]
    reply = dispatcher.handle(1, "ana", f" {answer}. ")
    assert reply.startswith("Correct 1/1\n\nTranslate 1 words")
    assert dispatcher.service.has_outstanding_task(1) is True
    assert dispatcher.service.rate(1) == 100


def test_learn_keeps_outstanding_task() -> None:
    dispatcher = _dispatcher()
    dispatcher.handle(1, "ana", "/set 2")
    dispatcher.handle(1, "ana", "task please")
    before = _expected_answers(dispatcher, 1)
    reply = dispatcher.handle(1, "ana", "/learn")
    assert "current task" in reply
    assert _expected_answers(dispatcher, 1) == before


def test_rate_messages() -> None:
    dispatcher = _dispatcher()
    assert dispatcher.handle(1, "ana", "/rate") == "You have not answered any words yet."
    dispatcher.handle(1, "ana", "/set 2")
    dispatcher.handle(1, "ana", "go")
    answers = _expected_answers(dispatcher, 1)
    dispatcher.handle(1, "ana", answers[0] + "\nwrong")
    assert dispatcher.handle(1, "ana", "/rate") == "Your correct answer rate is 50%!"


def test_users_do_not_share_tasks() -> None:
    dispatcher = _dispatcher()
    dispatcher.handle(1, "ana", "/learn")
    assert dispatcher.service.has_outstanding_task(2) is False
    dispatcher.handle(2, "bob", "/set 1")
    dispatcher.handle(2, "bob", "go")
    assert dispatcher.service.has_outstanding_task(1) is True
    assert dispatcher.service.has_outstanding_task(2) is True


def test_cyrillic_start_shows_help() -> None:
    dispatcher = _dispatcher()
    assert dispatcher.handle(1, "ana", "/старт") == HELP_TEXT
    assert dispatcher.service.has_outstanding_task(1) is False


def test_busy_user_is_not_given_a_second_task() -> None:
    dispatcher = _dispatcher()
    dispatcher.handle(1, "ana", "/set 2")
    dispatcher.handle(1, "ana", "go")
    before = _expected_answers(dispatcher, 1)
    assert dispatcher._new_task(1) == "Answer your current task first."
    assert _expected_answers(dispatcher, 1) == before


def test_concurrent_messages_from_one_user_stay_consistent() -> None:
    dispatcher = _dispatcher()
    dispatcher.handle(1, "ana", "/set 2")
    replies: list[str] = []
    errors: list[BaseException] = []
    replies_lock = threading.Lock()

    def send() -> None:
        for _ in range(50):
            try:
                reply = dispatcher.handle(1, "ana", "go")
            except Exception as exc:
                errors.append(exc)
                return
            with replies_lock:
                replies.append(reply)

    threads = [threading.Thread(target=send) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(replies) == 400
    evaluated = sum(1 for reply in replies if reply.startswith("Correct"))
    issued = sum(1 for reply in replies if reply.startswith("Translate"))
    busy = replies.count("Answer your current task first.")
    assert issued + evaluated + busy == 400
    profile = dispatcher.service.get_profile(1)
    assert profile is not None
    assert len(profile.history) == 2 * evaluated
    assert issued - evaluated == (1 if dispatcher.service.has_outstanding_task(1) else 0)
