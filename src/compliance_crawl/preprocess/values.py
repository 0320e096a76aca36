from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

PYTHON_LITERAL_TOKENS = (
    (re.compile(r"\bNone\b"), "null"),
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
)
LIST_DELIMITERS = (",", ";")
PIECE_STRIP_CHARS = " \t\r\n'\""


@dataclass(frozen=True)
class Scalar:
    text: str


@dataclass(frozen=True)
class ListValue:
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class MappingValue:
    entries: tuple[tuple[str, tuple[str, ...]], ...] = ()

    def as_dict(self) -> dict[str, tuple[str, ...]]:
        return dict(self.entries)


ParsedValue = Union[Scalar, ListValue, MappingValue]


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def _normalize_python_literal(text: str) -> str:
    normalized = text.replace("'", '"')
    for pattern, replacement in PYTHON_LITERAL_TOKENS:
        normalized = pattern.sub(replacement, normalized)
    return normalized


def parse_json_like(text: str) -> tuple[bool, Any]:
    """Strict JSON first, then JSON after Python-literal normalization."""
    ok, value = _loads(text)
    if ok:
        return ok, value
    return _loads(_normalize_python_literal(text))


def split_flat_list(text: str) -> list[str]:
    body = text.strip()
    if len(body) >= 2 and body[0] == "[" and body[-1] == "]":
        body = body[1:-1]
    delimiter = "," if "," in body else ";"
    pieces = (piece.strip(PIECE_STRIP_CHARS) for piece in body.split(delimiter))
    return [piece for piece in pieces if piece]


def _has_list_shape(text: str) -> bool:
    return text.startswith("[") or any(delimiter in text for delimiter in LIST_DELIMITERS)


def _coerce_member(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, list):
        return tuple(_stringify(item) for item in value)
    if isinstance(value, dict):
        flattened: list[str] = []
        for nested in value.values():
            flattened.extend(_coerce_member(nested))
        return tuple(flattened)
    if isinstance(value, str):
        text = value.strip()
        ok, parsed = parse_json_like(text)
        if ok and isinstance(parsed, list):
            return tuple(_stringify(item) for item in parsed)
        if any(delimiter in text for delimiter in LIST_DELIMITERS):
            return tuple(split_flat_list(text))
        return (text,) if text else ()
    return (_stringify(value),)


def _from_json(value: Any, raw: str) -> ParsedValue:
    if value is None:
        return ListValue()
    if isinstance(value, list):
        return ListValue(tuple(_stringify(item) for item in value))
    if isinstance(value, dict):
        return MappingValue(
            tuple((str(key), _coerce_member(member)) for key, member in value.items())
        )
    if isinstance(value, str):
        return Scalar(value)
    return Scalar(_stringify(value))


def parse_value(raw: Any) -> ParsedValue:
    """Recover a list/mapping/scalar from a quasi-JSON cell.

    The ladder is ordered and each later stage is lossier than the one before:
    strict JSON, JSON after rewriting Python literals (single quotes,
    None/True/False), then a flat comma/semicolon split. Blank input is an
    empty list. Anything else comes back as ``Scalar(raw)`` unchanged; this
    function never raises.
    """
    if raw is None:
        return ListValue()
    if not isinstance(raw, str):
        raw = _stringify(raw)
    text = raw.strip()
    if not text:
        return ListValue()

    ok, parsed = parse_json_like(text)
    if ok:
        try:
            return _from_json(parsed, raw)
        except RecursionError:
            return Scalar(raw)
    if _has_list_shape(text):
        return ListValue(tuple(split_flat_list(text)))
    return Scalar(raw)


def to_string_list(value: ParsedValue) -> list[str]:
    if isinstance(value, ListValue):
        return list(value.items)
    if isinstance(value, MappingValue):
        return [item for _, items in value.entries for item in items]
    text = value.text.strip()
    if any(delimiter in text for delimiter in LIST_DELIMITERS):
        return split_flat_list(text)
    return [text] if text else []


def serialize_value(value: ParsedValue) -> str:
    """Canonical JSON text that parses back to an equal value."""
    if isinstance(value, ListValue):
        return json.dumps(list(value.items), ensure_ascii=False)
    if isinstance(value, MappingValue):
        return json.dumps(
            {key: list(items) for key, items in value.entries}, ensure_ascii=False
        )
    return json.dumps(value.text, ensure_ascii=False)
