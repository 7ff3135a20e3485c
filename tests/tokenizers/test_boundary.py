from phrasetok.tokenizers import WhitespaceBoundary, build_whitespace_config


def test_default_splits_on_unicode_whitespace() -> None:
    boundary = WhitespaceBoundary()
    text = "  Show me\tthe\n way. "
    assert boundary.split(text) == ["Show", "me", "the", "way."]
    assert list(boundary.iter_spans("ab cd")) == [(0, 2), (3, 5)]


def test_separator_only_input_has_no_spans() -> None:
    assert list(WhitespaceBoundary().iter_spans(" \t\n ")) == []
    assert list(WhitespaceBoundary().iter_spans("")) == []


def test_bitmap_config() -> None:
    config = build_whitespace_config([" ", "|"])
    boundary = WhitespaceBoundary(config)
    assert boundary.is_separator(" ")
    assert boundary.is_separator("|")
    assert not boundary.is_separator("\t")
    assert not boundary.is_separator("　")
    assert boundary.split("a|b c\td") == ["a", "b", "c\td"]


def test_from_chars_matches_config() -> None:
    boundary = WhitespaceBoundary.from_chars("_")
    assert boundary.config == build_whitespace_config("_")
    assert boundary.split("snake_case_name") == ["snake", "case", "name"]
