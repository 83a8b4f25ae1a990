"""Word lists driving title cleanup and attribute mapping."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from functools import cache
from importlib import resources
from typing import TYPE_CHECKING, Any

from feedsync.domain.model import Condition

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

LEXICON_RESOURCE = "lexicons.toml"


@dataclass(frozen=True, slots=True)
class ConditionEntry:
    label: str
    tag: str
    aliases: frozenset[str]


@dataclass(frozen=True, slots=True, kw_only=True)
class Lexicon:
    colors: tuple[str, ...]
    forbidden_words: tuple[str, ...]
    typo_fixes: tuple[tuple[str, str], ...]
    model_suffixes: tuple[str, ...]
    capacity_numbers: tuple[str, ...]
    conditions: Mapping[Condition, ConditionEntry]
    active_availability: frozenset[str]
    preorder_availability: frozenset[str]

    def condition_for(self, raw: str) -> Condition | None:
        value = raw.strip().lower()
        for condition, entry in self.conditions.items():
            if value in entry.aliases:
                return condition
        return None

    def condition_label(self, condition: Condition) -> str:
        return self.conditions[condition].label

    def condition_tag(self, condition: Condition) -> str:
        return self.conditions[condition].tag


def parse_lexicon(data: Mapping[str, Any]) -> Lexicon:
    conditions = {
        Condition(name): ConditionEntry(
            label=entry["label"],
            tag=entry["tag"],
            aliases=frozenset(alias.lower() for alias in entry.get("aliases", ())) | {name},
        )
        for name, entry in data.get("conditions", {}).items()
    }
    missing = set(Condition) - set(conditions)
    if missing:
        names = ", ".join(sorted(missing))
        raise ValueError(f"Lexicon lacks condition entries for: {names}")

    availability = data.get("availability", {})
    return Lexicon(
        colors=_longest_first(data.get("colors", ())),
        forbidden_words=_longest_first(data.get("forbidden_words", ())),
        typo_fixes=tuple(
            sorted(
                ((wrong.lower(), right) for wrong, right in data.get("typo_fixes", {}).items()),
                key=lambda pair: -len(pair[0]),
            )
        ),
        model_suffixes=tuple(
            sorted(
                {suffix.strip() for suffix in data.get("model_suffixes", ()) if suffix.strip()},
                key=lambda suffix: (-len(suffix), suffix),
            )
        ),
        capacity_numbers=tuple(str(number) for number in data.get("capacity_numbers", ())),
        conditions=conditions,
        active_availability=frozenset(value.lower() for value in availability.get("active", ())),
        preorder_availability=frozenset(
            value.lower() for value in availability.get("preorder", ())
        ),
    )


def load_lexicon(path: Path | None = None) -> Lexicon:
    """Load a lexicon file; without ``path`` the bundled tables are returned."""

    if path is None:
        return default_lexicon()
    with path.open("rb") as handle:
        return parse_lexicon(tomllib.load(handle))


@cache
def default_lexicon() -> Lexicon:
    source = resources.files(__package__).joinpath(LEXICON_RESOURCE)
    return parse_lexicon(tomllib.loads(source.read_text(encoding="utf-8")))


def _longest_first(words: Any) -> tuple[str, ...]:
    unique = {word.strip().lower() for word in words if word.strip()}
    return tuple(sorted(unique, key=lambda word: (-len(word), word)))


__all__ = ["ConditionEntry", "Lexicon", "default_lexicon", "load_lexicon", "parse_lexicon"]
