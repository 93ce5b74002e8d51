import string

import pytest

from lumonos.cstring import (
    islower,
    strcasecmp,
    strcmp,
    strncasecmp,
    strncmp,
    strtoul,
    toupper,
)


@pytest.mark.parametrize("c", ["a", "m", "z"])
def test_islower_true(c):
    assert islower(c) is True


@pytest.mark.parametrize("c", ["A", "Z", "0", "{", "`", " "])
def test_islower_false(c):
    assert islower(c) is False


def test_toupper_letters_match_str_upper():
    for c in string.ascii_lowercase:
        assert toupper(c) == c.upper()


@pytest.mark.parametrize("c", ["A", "5", "_", "~", "\n"])
def test_toupper_leaves_others(c):
    assert toupper(c) == c


@pytest.mark.parametrize(
    "s1, s2, expected",
    [
        ("abc", "abc", 0),
        ("abc", "abd", -1),
        ("abd", "abc", 1),
        ("ab", "abc", -1),
        ("abc", "ab", 1),
        ("", "", 0),
    ],
)
def test_strcmp(s1, s2, expected):
    assert strcmp(s1, s2) == expected


def test_strcmp_none_sorts_first():
    assert strcmp(None, None) == 0
    assert strcmp(None, "x") == -1
    assert strcmp("x", None) == 1


def test_strcmp_stops_at_nul():
    assert strcmp("ab\0x", "ab\0y") == 0


def test_strncmp_prefix_equal():
    assert strncmp("abcdef", "abcxyz", 3) == 0


def test_strncmp_sign_and_antisymmetry():
    assert strncmp("abc", "abd", 3) < 0
    assert strncmp("abd", "abc", 3) > 0
    assert strncmp("abc", "abd", 3) == -strncmp("abd", "abc", 3)


def test_strncmp_zero_length():
    assert strncmp("abc", "xyz", 0) == 0


def test_strncmp_shorter_string():
    assert strncmp("ab", "abc", 5) < 0


def test_strcasecmp():
    assert strcasecmp("Hello", "hELLO") == 0
    assert strcasecmp("apple", "BANANA") == -1
    assert strcasecmp("Zeta", "alpha") == 1
    assert strcasecmp(None, "a") == -1


def test_strncasecmp_equal():
    assert strncasecmp("abc", "abc", 3) == 0
    assert strncasecmp("abc", "xyz", 0) == 0


def test_strncasecmp_stops_at_first_exact_mismatch():
    # The scan stops at 'A' vs 'a'; their uppercase forms are equal.
    assert strncasecmp("Ax", "ay", 5) == 0


def test_strncasecmp_sign():
    assert strncasecmp("abc", "abd", 3) < 0
    assert strncasecmp("abd", "abc", 3) > 0


def test_strtoul_decimal():
    assert strtoul("123", 10) == (123, 3)


def test_strtoul_stops_at_non_digit():
    assert strtoul("+42xyz", 10) == (42, 3)


def test_strtoul_other_bases():
    assert strtoul("777", 8) == (int("777", 8), 3)
    assert strtoul("1012", 2) == (int("101", 2), 3)


def test_strtoul_no_digits():
    assert strtoul("", 10) == (0, 0)
    assert strtoul("abc", 10) == (0, 0)


def test_strtoul_negative_wraps():
    neg, end = strtoul("-7", 10)
    pos, _ = strtoul("7", 10)
    assert end == 2
    assert (neg + pos) % (1 << 64) == 0
    assert neg == (1 << 64) - 7


@pytest.mark.parametrize("base", [0, 1, 11, 16])
def test_strtoul_bad_base(base):
    with pytest.raises(ValueError):
        strtoul("10", base)


def test_strtoul_none_text():
    with pytest.raises(ValueError):
        strtoul(None, 10)