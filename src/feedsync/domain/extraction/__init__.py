"""Title cleanup and attribute extraction for feed items."""

from __future__ import annotations

from .extractor import AttributeExtractor, derive_variant, extract_model_key, extract_model_title
from .lexicon import Lexicon, default_lexicon, load_lexicon
from .rules import Rule, build_title_rules

__all__ = [
    "AttributeExtractor",
    "Lexicon",
    "Rule",
    "build_title_rules",
    "default_lexicon",
    "derive_variant",
    "extract_model_key",
    "extract_model_title",
    "load_lexicon",
]
