import pytest

from b3history.env import get_env_bool, get_env_char, get_env_int

KEY = "B3HISTORY_TEST_SETTING"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(KEY, raising=False)


def test_int_unset_returns_default():
    assert get_env_int(KEY, 1000) == 1000


@pytest.mark.parametrize("raw, expected", [("42", 42), ("-7", -7), ("+3", 3), ("0", 0)])
def test_int_parses_value(monkeypatch, raw, expected):
    monkeypatch.setenv(KEY, raw)
    assert get_env_int(KEY, 1000) == expected


@pytest.mark.parametrize("raw", ["abc", "", "1.5", "1_000", " 12", "12 "])
def test_int_invalid_falls_back_to_default(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_env_int(KEY, 1000) == 1000


def test_bool_unset_returns_default():
    assert get_env_bool(KEY, True) is True
    assert get_env_bool(KEY, False) is False


@pytest.mark.parametrize("raw", ["true", "TRUE", "True", "1", "yes", "YES"])
def test_bool_truthy_words(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_env_bool(KEY, False) is True


@pytest.mark.parametrize("raw", ["false", "0", "no", "on", "", "y"])
def test_bool_other_values_are_false_even_with_true_default(monkeypatch, raw):
    monkeypatch.setenv(KEY, raw)
    assert get_env_bool(KEY, True) is False


def test_char_unset_returns_default():
    assert get_env_char(KEY, ";") == ";"


def test_char_empty_returns_default(monkeypatch):
    monkeypatch.setenv(KEY, "")
    assert get_env_char(KEY, ";") == ";"


def test_char_takes_first_character(monkeypatch):
    monkeypatch.setenv(KEY, "|,")
    assert get_env_char(KEY, ";") == "|"