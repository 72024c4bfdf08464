"""Tests for prompt assembly and title derivation."""

from chatrelay.models.conversation import ChatMessage
from chatrelay.services.context import build_prompt, finalize_title, provisional_title


def _msg(role, content):
    return ChatMessage(conversation_id="c", role=role, content=content)


def test_no_history_passes_prompt_through():
    assert build_prompt([], "Hi") == "Hi"


def test_history_is_framed():
    history = [_msg("user", "Hi"), _msg("assistant", "Hello")]
    assert build_prompt(history, "How are you") == (
        "Previous conversation:\n"
        "User: Hi\n"
        "Assistant: Hello\n"
        "\n"
        "Current message:\n"
        "How are you\n"
        "\n"
        "Please respond remembering our previous conversation and maintain context."
    )


def test_unknown_roles_are_dropped_but_still_count_as_history():
    prompt = build_prompt([_msg("system", "be nice")], "Hi")
    assert "be nice" not in prompt
    assert prompt.startswith("Previous conversation:\n\n\nCurrent message:\nHi")


def test_unknown_roles_dropped_between_known_ones():
    history = [_msg("user", "a"), _msg("scheduled", "x"), _msg("assistant", "b")]
    assert "User: a\nAssistant: b\n\n" in build_prompt(history, "c")


def test_current_prompt_not_repeated_as_user_line():
    prompt = build_prompt([_msg("user", "first")], "second")
    assert "User: second" not in prompt
    assert "Current message:\nsecond" in prompt


def test_finalized_title_short_prompt_unchanged():
    assert finalize_title("Hi") == "Hi"


def test_finalized_title_exactly_50_chars_has_no_ellipsis():
    prompt = "x" * 50
    assert finalize_title(prompt) == prompt


def test_finalized_title_51_chars_truncated_with_ellipsis():
    prompt = "y" * 51
    assert finalize_title(prompt) == "y" * 50 + "..."


def test_provisional_title_always_has_ellipsis():
    assert provisional_title("Hey") == "Hey..."
    assert provisional_title("z" * 50) == "z" * 50 + "..."
    assert provisional_title("z" * 80) == "z" * 50 + "..."


def test_provisional_and_finalized_titles_differ_for_short_prompts():
    assert provisional_title("Hey") != finalize_title("Hey")
