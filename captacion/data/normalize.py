"""
Header-key normalization and flexible field resolution.

A logical field is resolved from a raw row through an ordered rule list:
every alias of the field as an ``ExactAlias``, followed by the field's
heuristics. The first rule that finds a key with a non-empty value wins.
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Union

import pandas as pd

from captacion.config import FIELD_ALIASES, FIELD_HEURISTICS
from captacion.data.schemas import MISSING, FieldValue

_NON_TOKEN_RE = re.compile(r"[^a-z0-9]")


# ---------------------------------------------------------------------------
# Key normalization
# ---------------------------------------------------------------------------

def normalize_key(name: Any) -> str:
    """Canonical comparable token: trimmed, lower-case, no diacritics, ``[a-z0-9]`` only."""
    if name is None:
        return ""
    text = str(name).strip().lower()
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_TOKEN_RE.sub("", stripped)


# ---------------------------------------------------------------------------
# Match rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExactAlias:
    """Header whose normalized token equals the alias' normalized token."""
    name: str

    def matches(self, key: str) -> bool:
        return normalize_key(key) == normalize_key(self.name)


@dataclass(frozen=True)
class SubstringHeuristic:
    """Header whose lower-cased text contains ``pattern``."""
    pattern: str

    def matches(self, key: str) -> bool:
        return self.pattern.lower() in str(key).lower()


@dataclass(frozen=True)
class TokenHeuristic:
    """Header whose whole normalized token equals ``token`` (no substring match)."""
    token: str

    def matches(self, key: str) -> bool:
        return normalize_key(key) == normalize_key(self.token)


MatchRule = Union[ExactAlias, SubstringHeuristic, TokenHeuristic]

_HEURISTIC_KINDS = {
    "substring": SubstringHeuristic,
    "token": TokenHeuristic,
}


def build_rules(
    aliases: Sequence[str],
    heuristics: Iterable[MatchRule] = (),
) -> tuple[MatchRule, ...]:
    """Aliases first (in priority order), heuristics after."""
    return tuple(ExactAlias(a) for a in aliases) + tuple(heuristics)


def rules_for(field: str) -> tuple[MatchRule, ...]:
    """Configured rule list for a logical field of ``CanonicalRecord``."""
    heuristics = [
        _HEURISTIC_KINDS[kind](arg) for kind, arg in FIELD_HEURISTICS.get(field, ())
    ]
    return build_rules(FIELD_ALIASES[field], heuristics)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def is_blank(value: Any) -> bool:
    """None, NaN/NaT, or text that is empty after trimming."""
    if value is None:
        return True
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return True
    return str(value).strip() == ""


def as_text(value: Any) -> str:
    """Trimmed text form of a raw cell; integral floats lose their ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def match_key(row: Mapping[str, Any], rules: Sequence[MatchRule]) -> str | None:
    """Return the row key selected by the first successful rule, or None."""
    for rule in rules:
        for key, value in row.items():
            if rule.matches(key) and not is_blank(value):
                return key
    return None


def resolve(
    row: Mapping[str, Any],
    aliases: Sequence[str],
    heuristics: Iterable[MatchRule] = (),
) -> FieldValue:
    """Resolve a logical field from ``row`` as text, or MISSING."""
    key = match_key(row, build_rules(aliases, heuristics))
    if key is None:
        return MISSING
    return as_text(row[key])


def resolve_field(row: Mapping[str, Any], field: str) -> FieldValue:
    """``resolve`` with the configured aliases and heuristics for ``field``."""
    raw = resolve_raw(row, field)
    return raw if raw is MISSING else as_text(raw)


def resolve_raw(row: Mapping[str, Any], field: str) -> Any:
    """Untyped value for ``field`` (for date/currency coercion), or MISSING."""
    key = match_key(row, rules_for(field))
    if key is None:
        return MISSING
    return row[key]
