from __future__ import annotations

from compliance_crawl.preprocess.values import (
    ListValue,
    MappingValue,
    Scalar,
    parse_value,
    serialize_value,
    split_flat_list,
    to_string_list,
)


def test_python_style_list_parses_to_list() -> None:
    assert parse_value("['A', 'B']") == ListValue(("A", "B"))


def test_blank_and_missing_cells_are_empty_lists() -> None:
    assert parse_value("") == ListValue(())
    assert parse_value("   ") == ListValue(())
    assert parse_value(None) == ListValue(())


def test_strict_json_wins_before_normalization() -> None:
    assert parse_value('["it\'s", "b"]') == ListValue(("it's", "b"))


def test_python_literal_tokens_are_normalized() -> None:
    value = parse_value("{'enabled': True, 'vendor': None, 'opt_out': [False, 1]}")
    assert value == MappingValue(
        (
            ("enabled", ("true",)),
            ("vendor", ()),
            ("opt_out", ("false", "1")),
        )
    )


def test_mapping_members_are_coerced_to_lists() -> None:
    value = parse_value(
        '{"third_party": {"ads": ["a.com", "b.com"], "cdn": "c.com"},'
        ' "first_party": "x.com; y.com", "count": 3.0, "empty": {}}'
    )
    assert isinstance(value, MappingValue)
    assert value.as_dict() == {
        "third_party": ("a.com", "b.com", "c.com"),
        "first_party": ("x.com", "y.com"),
        "count": ("3",),
        "empty": (),
    }


def test_unquoted_bracketed_list_falls_back_to_split() -> None:
    assert parse_value("[uspapi, OptanonConsent]") == ListValue(("uspapi", "OptanonConsent"))


def test_semicolon_is_secondary_delimiter() -> None:
    assert parse_value("a; b ;; c") == ListValue(("a", "b", "c"))
    assert split_flat_list("['a;b', 'c']") == ["a;b", "c"]


def test_plain_text_is_returned_unchanged() -> None:
    assert parse_value("  hello world ") == Scalar("  hello world ")
    assert parse_value("{not json") == Scalar("{not json")


def test_json_scalars_become_scalars() -> None:
    assert parse_value("42") == Scalar("42")
    assert parse_value('"quoted"') == Scalar("quoted")
    assert parse_value("true") == Scalar("true")
    assert parse_value("null") == ListValue(())


def test_nested_containers_in_lists_are_stringified() -> None:
    assert parse_value('[{"a": 1}, [2, 3], null]') == ListValue(('{"a":1}', "[2,3]", "null"))


def test_to_string_list_for_each_variant() -> None:
    assert to_string_list(ListValue(("a",))) == ["a"]
    assert to_string_list(MappingValue((("k", ("a", "b")), ("j", ("c",))))) == ["a", "b", "c"]
    assert to_string_list(Scalar("a, b")) == ["a", "b"]
    assert to_string_list(Scalar("  ")) == []
    assert to_string_list(Scalar("solo")) == ["solo"]


def test_parsing_is_idempotent_through_canonical_serialization() -> None:
    samples = [
        "['A', 'B']",
        '["x", 1, true, null]',
        "{'k': ['a', 'b'], 'n': {'x': 'y'}}",
        '{"empty": {}}',
        "{}",
        "[]",
        "7",
        '"text"',
    ]
    for raw in samples:
        first = parse_value(raw)
        second = parse_value(serialize_value(first))
        assert second == first, raw
        assert parse_value(raw) == first


def test_deeply_nested_brackets_do_not_raise() -> None:
    raw = "[" * 100000 + "]" * 100000

    value = parse_value(raw)

    assert isinstance(value, ListValue)
    assert value.items == ("[" * 99999 + "]" * 99999,)


def test_deeply_nested_object_falls_back_to_scalar() -> None:
    raw = '{"a": ' * 100000 + "1" + "}" * 100000

    assert parse_value(raw) == Scalar(raw)
