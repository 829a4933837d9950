"""Tests for Turn entity."""

from personachat.domain.entities import Role, Turn, latest_user_text


class TestTurn:
    """Turn tests."""

    def test_factories_set_role(self) -> None:
        assert Turn.user("hi").role is Role.USER
        assert Turn.assistant("hello").role is Role.ASSISTANT

    def test_to_message(self) -> None:
        assert Turn.assistant("hello").to_message() == {
            "role": "assistant",
            "content": "hello",
        }


class TestLatestUserText:
    """latest_user_text tests."""

    def test_returns_last_user_turn(self) -> None:
        turns = [Turn.user("first"), Turn.assistant("reply"), Turn.user("second")]
        assert latest_user_text(turns) == "second"

    def test_skips_trailing_assistant_turns(self) -> None:
        turns = (Turn.user("question"), Turn.assistant("answer"))
        assert latest_user_text(turns) == "question"

    def test_empty_history(self) -> None:
        assert latest_user_text([]) == ""
