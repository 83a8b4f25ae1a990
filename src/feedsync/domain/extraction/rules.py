"""Named title rewrite rules applied in a fixed order to derive model titles."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from feedsync.domain.text import collapse_whitespace, title_case

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .lexicon import Lexicon

type Replacement = str | Callable[[re.Match[str]], str]

CAPACITY_PATTERN = re.compile(r"\b(\d{1,4})\s?(GB|TB)\b", re.IGNORECASE)


class Rule(Protocol):
    @property
    def name(self) -> str: ...

    def apply(self, text: str) -> str: ...


@dataclass(frozen=True, slots=True)
class RegexRule:
    name: str
    pattern: re.Pattern[str]
    replacement: Replacement = " "

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


@dataclass(frozen=True, slots=True)
class FunctionRule:
    name: str
    func: Callable[[str], str]

    def apply(self, text: str) -> str:
        return self.func(text)


@dataclass(frozen=True, slots=True)
class BrandPrefixRule:
    """Prepend the brand unless the title already starts with it."""

    brand: str
    name: str = "brand-prefix"

    def apply(self, text: str) -> str:
        brand = collapse_whitespace(self.brand)
        if not brand:
            return text
        if not text:
            return brand
        if text.casefold().startswith(brand.casefold()):
            return text
        return f"{brand} {text}"


def word_pattern(words: Iterable[str]) -> re.Pattern[str] | None:
    """Case-insensitive alternation of whole words, in the given priority order."""

    alternatives = [r"\s+".join(re.escape(part) for part in word.split()) for word in words]
    alternatives = [item for item in alternatives if item]
    if not alternatives:
        return None
    return re.compile(rf"(?<!\w)(?:{'|'.join(alternatives)})(?!\w)", re.IGNORECASE)


def word_removal_rule(name: str, words: Iterable[str]) -> Rule:
    pattern = word_pattern(words)
    if pattern is None:
        return FunctionRule(name, lambda text: text)
    return RegexRule(name, pattern)


def typo_fix_rule(fixes: Iterable[tuple[str, str]]) -> Rule:
    lookup = {collapse_whitespace(wrong).lower(): right for wrong, right in fixes}
    pattern = word_pattern(lookup)
    if pattern is None:
        return FunctionRule("typo-fixes", lambda text: text)

    def replace(match: re.Match[str]) -> str:
        return lookup[collapse_whitespace(match.group(0)).lower()]

    return RegexRule("typo-fixes", pattern, replace)


def suffix_expansion_rule(suffixes: Iterable[str]) -> Rule:
    canonical = {suffix.lower(): suffix for suffix in suffixes}
    if not canonical:
        return FunctionRule("model-suffixes", lambda text: text)
    alternation = "|".join(re.escape(suffix) for suffix in canonical.values())
    pattern = re.compile(rf"\b([A-Za-z]{{1,6}}\d{{1,4}})({alternation})\b", re.IGNORECASE)

    def replace(match: re.Match[str]) -> str:
        return f"{match.group(1)} {canonical[match.group(2).lower()]}"

    return RegexRule("model-suffixes", pattern, replace)


def _fold_flip(match: re.Match[str]) -> str:
    return f"Z {match.group(1).capitalize()}{match.group(2)}"


def build_title_rules(lexicon: Lexicon) -> tuple[Rule, ...]:
    """Model-title pipeline, without the per-item brand prefix."""

    capacity_numbers = "|".join(re.escape(number) for number in lexicon.capacity_numbers)
    rules: list[Rule] = [
        RegexRule("parentheses", re.compile(r"\([^)]*\)|\[[^\]]*\]")),
        RegexRule("capacity", CAPACITY_PATTERN),
        word_removal_rule("colors", lexicon.colors),
        word_removal_rule("forbidden-words", lexicon.forbidden_words),
        typo_fix_rule(lexicon.typo_fixes),
        RegexRule(
            "fold-flip",
            re.compile(r"\b(?:z\s*)?(flip|fold)\s*(\d{1,2})\b", re.IGNORECASE),
            _fold_flip,
        ),
        RegexRule(
            "sku-codes",
            re.compile(r"\b[A-Z]{1,3}-[A-Z0-9]{3,}\b|\b[A-Z]{1,2}\d{3,4}[A-Z]{1,3}\d?\b"),
        ),
    ]
    if capacity_numbers:
        rules.append(
            RegexRule("bare-capacity", re.compile(rf"(?<![\w.])(?:{capacity_numbers})(?![\w.])"))
        )
    rules.extend(
        [
            suffix_expansion_rule(lexicon.model_suffixes),
            RegexRule("separators", re.compile(r"(?:^|\s)[-/,|+]+(?=\s|$)")),
            FunctionRule("collapse-whitespace", collapse_whitespace),
            FunctionRule("title-case", title_case),
        ]
    )
    return tuple(rules)


def apply_rules(text: str, rules: Iterable[Rule]) -> str:
    for rule in rules:
        text = rule.apply(text)
    return text


def rules_by_name(rules: Iterable[Rule]) -> Mapping[str, Rule]:
    return {rule.name: rule for rule in rules}


__all__ = [
    "CAPACITY_PATTERN",
    "BrandPrefixRule",
    "FunctionRule",
    "RegexRule",
    "Rule",
    "apply_rules",
    "build_title_rules",
    "rules_by_name",
    "suffix_expansion_rule",
    "typo_fix_rule",
    "word_pattern",
    "word_removal_rule",
]
