from __future__ import annotations

import pytest

from feedsync.domain.extraction import Rule, build_title_rules, default_lexicon
from feedsync.domain.extraction.rules import (
    BrandPrefixRule,
    apply_rules,
    rules_by_name,
    suffix_expansion_rule,
    typo_fix_rule,
    word_pattern,
    word_removal_rule,
)


@pytest.fixture(scope="module")
def rules() -> dict[str, Rule]:
    return dict(rules_by_name(build_title_rules(default_lexicon())))


def test_rules_run_in_a_fixed_order() -> None:
    names = [rule.name for rule in build_title_rules(default_lexicon())]

    assert names == [
        "parentheses",
        "capacity",
        "colors",
        "forbidden-words",
        "typo-fixes",
        "fold-flip",
        "sku-codes",
        "bare-capacity",
        "model-suffixes",
        "separators",
        "collapse-whitespace",
        "title-case",
    ]


def test_word_pattern_prefers_longest_phrase() -> None:
    pattern = word_pattern(["sky blue", "blue"])
    assert pattern is not None

    assert pattern.sub("#", "Galaxy Sky  Blue and blue") == "Galaxy # and #"


def test_word_pattern_respects_word_boundaries() -> None:
    pattern = word_pattern(["red"])
    assert pattern is not None

    assert pattern.sub("", "Redmi red") == "Redmi "


def test_word_removal_rule_without_words_is_identity() -> None:
    rule = word_removal_rule("colors", [])

    assert rule.apply("Keep Me") == "Keep Me"


def test_typo_fix_rule_replaces_known_misspellings() -> None:
    rule = typo_fix_rule([("galax y", "galaxy"), ("samsumg", "samsung")])

    assert rule.apply("Samsumg Galax Y A15") == "samsung galaxy A15"


def test_suffix_expansion_splits_glued_suffixes() -> None:
    rule = suffix_expansion_rule(["FE", "Ultra", "Pro"])

    assert rule.apply("Galaxy S25FE") == "Galaxy S25 FE"
    assert rule.apply("Galaxy S24ultra") == "Galaxy S24 Ultra"
    assert rule.apply("Redmi Note13Pro") == "Redmi Note13 Pro"
    assert rule.apply("Galaxy S25 FE") == "Galaxy S25 FE"


def test_brand_prefix_rule() -> None:
    assert BrandPrefixRule("Samsung").apply("Galaxy A15") == "Samsung Galaxy A15"
    assert BrandPrefixRule("Samsung").apply("samsung Galaxy A15") == "samsung Galaxy A15"
    assert BrandPrefixRule("  ").apply("Galaxy A15") == "Galaxy A15"
    assert BrandPrefixRule("Apple").apply("") == "Apple"


def test_apply_rules_cleans_noise_from_title() -> None:
    lexicon = default_lexicon()
    title = "Smartphone Samsung Galaxy A55 5G 8GB 256GB Libre - Azul (SM-A556B)"

    assert apply_rules(title, build_title_rules(lexicon)) == "Samsung Galaxy A55 5G"


def test_fold_flip_rule_normalises_spacing(rules: dict[str, Rule]) -> None:
    rule = rules["fold-flip"]

    assert rule.apply("Galaxy Z Flip 5") == "Galaxy Z Flip5"
    assert rule.apply("Galaxy fold6") == "Galaxy Z Fold6"


def test_sku_codes_are_removed(rules: dict[str, Rule]) -> None:
    rule = rules["sku-codes"]

    assert rule.apply("Galaxy A15 SM-A155F").strip() == "Galaxy A15"
    assert rule.apply("Galaxy S24 SM921B").strip() == "Galaxy S24"
