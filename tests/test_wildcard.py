import pytest

from minish.tokens import TokenType
from minish.wildcard import (
    WildcardType,
    expand_wildcard,
    find_wildcard_type,
    is_blank_line,
    list_matching,
    match_pattern,
)


@pytest.fixture
def folder(tmp_path):
    for name in ["a.txt", "b.txt", "c.log", ".hidden.txt"]:
        (tmp_path / name).write_text("")
    return tmp_path


@pytest.mark.parametrize(
    "name, pattern, expected",
    [
        ("abc", "a*c", True),
        ("abc", "*", True),
        ("", "*", True),
        ("", "", True),
        ("abc", "abc", True),
        ("abc", "a*d", False),
        ("ab", "abc", False),
        ("aXbXc", "*b*c", True),
        ("aXcXb", "*b*c", False),
        ("ab", "a**b", True),
        ("a", "a*a", False),
    ],
)
def test_match_pattern(name, pattern, expected):
    assert match_pattern(name, pattern) is expected


def test_expand_wildcard_suffix(folder):
    tokens = expand_wildcard("*.txt", str(folder))
    assert [t.value for t in tokens] == [".hidden.txt", "a.txt", "b.txt"]
    assert all(t.type is TokenType.WORD for t in tokens)


def test_expand_wildcard_star_lists_dot_entries(folder):
    names = {t.value for t in expand_wildcard("*", str(folder))}
    assert {".", "..", "a.txt", "c.log"} <= names


def test_expand_wildcard_no_match(folder):
    assert expand_wildcard("*.png", str(folder)) == []


def test_expand_wildcard_missing_directory(tmp_path):
    with pytest.raises(OSError):
        expand_wildcard("*", str(tmp_path / "absent"))


@pytest.mark.parametrize("line, expected", [("", True), (" \t\n", True), (" a ", False)])
def test_is_blank_line(line, expected):
    assert is_blank_line(line) is expected


@pytest.mark.parametrize(
    "word, expected",
    [
        ("*", WildcardType.ONLY),
        ("**", WildcardType.ONLY),
        ("*abc", WildcardType.START),
        ("*abc*", WildcardType.START),
        ("abc*", WildcardType.END),
        ("abc", WildcardType.NONE),
        ("", WildcardType.NONE),
        ("ab|*", WildcardType.NONE),
    ],
)
def test_find_wildcard_type(word, expected):
    assert find_wildcard_type(word) is expected


def test_list_matching_suffix(folder):
    tokens, consumed = list_matching("*.txt", str(folder))
    assert [t.value for t in tokens] == ["a.txt", "b.txt"]
    assert consumed == len("*.txt")


def test_list_matching_prefix(folder):
    tokens, consumed = list_matching("c*", str(folder))
    assert [t.value for t in tokens] == ["c.log"]
    assert consumed == len("c*")


def test_list_matching_only_star_skips_hidden(folder):
    tokens, consumed = list_matching("*", str(folder))
    assert [t.value for t in tokens] == ["a.txt", "b.txt", "c.log"]
    assert consumed == 1


def test_list_matching_stops_at_special(folder):
    _, consumed = list_matching("*.log|x", str(folder))
    assert consumed == len("*.log")


def test_list_matching_without_star(folder):
    assert list_matching("a.txt", str(folder)) == ([], 0)


def test_list_matching_missing_directory(tmp_path):
    with pytest.raises(OSError):
        list_matching("*", str(tmp_path / "absent"))