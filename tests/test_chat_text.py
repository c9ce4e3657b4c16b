import pytest

from chatbye.chat_text import (
    MAX_MESSAGE_LENGTH,
    MAX_NAME_LENGTH,
    NameCheck,
    check_name,
    format_message,
    format_nick_change,
    split_message,
    truncate_message,
)

SEP = ": "


# format_message

def test_format_message_short_text_unchanged():
    assert format_message("hello", 50) == "hello"


def test_format_message_breaks_at_space():
    assert format_message("hello world", 5) == "hello<br>world"


def test_format_message_empty():
    assert format_message("", 10) == ""


def test_format_message_lines_fit_and_keep_words():
    text = "the quick brown fox jumps over the lazy dog again and again"
    result = format_message(text, 12)
    lines = result.split("<br>")
    assert all(len(line) <= 12 for line in lines)
    assert " ".join(line.strip() for line in lines) == text


def test_format_message_cuts_long_word():
    word = "x" * 23
    lines = format_message(word, 10).split("<br>")
    assert "".join(lines) == word
    assert [len(line) for line in lines][:2] == [10, 10]


def test_format_message_rejects_bad_width():
    with pytest.raises(ValueError):
        format_message("abc", 0)


# format_nick_change

def test_nick_change_without_separator_returned_as_is():
    text = "  plain notice\n"
    assert format_nick_change(text, "Me", "Arial", SEP) == text


def test_nick_change_join_notice():
    result = format_nick_change(" : Bob", "Me", "Arial", SEP)
    assert result.startswith("<b>Подключился к чату: ")
    assert "[Bob]" in result
    assert "font-family: Arial;" in result


def test_nick_change_own_rename():
    result = format_nick_change("Old: Me", "Me", "Arial", SEP)
    assert result.startswith("<b>Вы сменили имя на ")
    assert "[Me]" in result


def test_nick_change_other_rename():
    result = format_nick_change("Alice: Bob\r\n", "Me", "Serif", SEP)
    assert result.startswith("Пользователь ")
    assert "[Alice]" in result
    assert "теперь известен как" in result
    assert result.index("[Alice]") < result.index("[Bob]")
    assert "font-family: Serif;" in result


def test_nick_change_empty_separator():
    with pytest.raises(ValueError):
        format_nick_change("a: b", "Me", "Arial", "")


# split_message

def test_split_message_short_kept_whole():
    assert split_message("One. Two! Three?", 100) == ["One. Two! Three?"]


def test_split_message_at_sentences():
    assert split_message("Hello there. General Kenobi.", 15) == [
        "Hello there.",
        "General Kenobi.",
    ]


def test_split_message_forces_cut_of_long_sentence():
    sentence = "a" * 10
    parts = split_message(sentence, 4)
    assert "".join(parts) == sentence
    assert all(len(part) <= 4 for part in parts)


def test_split_message_empty():
    assert split_message("", 10) == []


def test_split_message_keeps_all_words():
    text = "First one. Second one! Third one? Fourth."
    parts = split_message(text, 12)
    assert " ".join(parts).split() == text.split()


# truncate_message

def test_truncate_leaves_short_message():
    assert truncate_message("hi") == "hi"


def test_truncate_cuts_long_message():
    text = "b" * (MAX_MESSAGE_LENGTH + 5)
    result = truncate_message(text)
    assert len(result) == MAX_MESSAGE_LENGTH
    assert text.startswith(result)


# check_name

def test_check_name_accepted():
    assert check_name("  Alice ", "Bob") is NameCheck.ACCEPTED


def test_check_name_unchanged():
    assert check_name("Bob", "Bob") is NameCheck.UNCHANGED


def test_check_name_too_long():
    assert check_name("n" * (MAX_NAME_LENGTH + 1), "Bob") is NameCheck.TOO_LONG


def test_check_name_at_limit_accepted():
    assert check_name("n" * MAX_NAME_LENGTH, "Bob") is NameCheck.ACCEPTED


def test_check_name_blank_is_invalid():
    assert check_name("   ", "Bob") is NameCheck.INVALID
    assert NameCheck.INVALID.message == "Неверное имя"


def test_check_name_too_long_message():
    assert check_name("z" * 40, "") .message == "Имя слишком длинное"