"""Text handling for the chat pages: wrapping, splitting, nickname notices and name checks."""

from __future__ import annotations

import enum
import re

LINE_WIDTH = 50
MAX_PART_LENGTH = 4096
MAX_MESSAGE_LENGTH = 30000
MAX_NAME_LENGTH = 25

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


class NameCheck(enum.Enum):
    """Outcome of checking a nickname typed by the user."""

    ACCEPTED = "accepted"
    UNCHANGED = "unchanged"
    TOO_LONG = "too_long"
    INVALID = "invalid"

    @property
    def message(self) -> str:
        """Text shown to the user for this outcome; empty when accepted."""
        return _NAME_CHECK_MESSAGES[self]


_NAME_CHECK_MESSAGES = {
    NameCheck.ACCEPTED: "",
    NameCheck.UNCHANGED: "Вы не изменили имя. Вы хотите продолжить без изменений?",
    NameCheck.TOO_LONG: "Имя слишком длинное",
    NameCheck.INVALID: "Неверное имя",
}


def format_message(message: str, max_length: int = LINE_WIDTH) -> str:
    """Wrap a message into lines of at most max_length, joined by <br>.

    Lines break at whitespace where possible; a word longer than a line is cut.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    lines: list[str] = []
    start = 0
    length = len(message)
    while start < length:
        end = start + max_length
        if end >= length:
            end = length
        else:
            while end > start and not message[end].isspace():
                end -= 1
            if end == start:
                end = start + max_length
        lines.append(message[start:end])
        start = end
        while start < length and message[start].isspace():
            start += 1
    return "<br>".join(lines)


def format_nick_change(
    message: str,
    client_name: str,
    font_family: str,
    separator: str,
) -> str:
    """Render a server notice of the form "old<separator>new" as HTML.

    A notice without the separator is returned unchanged.
    """
    if not separator:
        raise ValueError("separator must not be empty")

    cleaned = message.strip().replace("\n", "").replace("\r", "")
    parts = cleaned.split(separator)
    if len(parts) < 2:
        return message

    old_nick = parts[0].strip()
    new_nick = parts[1].strip()

    if not old_nick:
        return (
            "<b>Подключился к чату: "
            f"<span style='color: blue; font-family: {font_family};'>[{new_nick}]</span></b>"
        )

    if new_nick == client_name:
        return (
            "<b>Вы сменили имя на "
            f"<span style='color: blue; font-family: {font_family};'>[{new_nick}]</span></b>"
        )

    return (
        f"Пользователь <b><span style='color: red;'>[{old_nick}]</span></b> "
        "теперь известен как "
        f"<b><span style='color: green; font-family: {font_family}; '>[{new_nick}]</span></b>"
    )


def split_message(message: str, max_length: int = MAX_PART_LENGTH) -> list[str]:
    """Split a message into parts at sentence ends, forcing cuts in overlong sentences."""
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    sentences = [part for part in _SENTENCE_BREAK.split(message) if part]
    result: list[str] = []
    current = ""
    for sentence in sentences:
        if len(current) + len(sentence) <= max_length:
            current = f"{current} {sentence}" if current else sentence
            continue
        if current:
            result.append(current)
            current = ""
        if len(sentence) > max_length:
            result.extend(
                sentence[pos:pos + max_length]
                for pos in range(0, len(sentence), max_length)
            )
        else:
            current = sentence
    if current:
        result.append(current)
    return result


def truncate_message(message: str) -> str:
    """Cut a message down to the longest length the chat accepts."""
    return message[:MAX_MESSAGE_LENGTH]


def check_name(name: str, current_name: str) -> NameCheck:
    """Decide what to do with a nickname the user entered."""
    name = name.strip()
    if name and name != current_name and len(name) <= MAX_NAME_LENGTH:
        return NameCheck.ACCEPTED
    if name == current_name:
        return NameCheck.UNCHANGED
    if len(name) >= MAX_NAME_LENGTH:
        return NameCheck.TOO_LONG
    return NameCheck.INVALID