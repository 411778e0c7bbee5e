"""
Similarity scoring between content items.

``score`` is a weighted sum of four independent signals (category,
pricing tier, rating proximity, name/description token overlap) and is
used to rank alternative suggestions. ``feature_similarity`` is the
Jaccard index over curated feature lists.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Set

from config.config_loader import get_tunable
from models import ContentItem


@dataclass(frozen=True)
class SimilarityInput:
    category_id: Optional[str]
    pricing_type: Optional[str]
    rating: float
    text: str

    @classmethod
    def from_item(cls, item: ContentItem) -> "SimilarityInput":
        text = f"{item.name or ''} {item.short_description or ''}".lower().strip()
        return cls(
            category_id=item.category_id,
            pricing_type=item.pricing_type,
            rating=float(item.rating or 0.0),
            text=text,
        )


@dataclass(frozen=True)
class SimilarityWeights:
    category: float = 0.4
    pricing: float = 0.2
    rating: float = 0.1
    text: float = 0.3
    rating_window: float = 1.0
    min_token_length: int = 4
    precision: int = 2

    @classmethod
    def from_config(cls) -> "SimilarityWeights":
        defaults = cls()
        return cls(
            category=get_tunable("similarity.weights.category", defaults.category),
            pricing=get_tunable("similarity.weights.pricing", defaults.pricing),
            rating=get_tunable("similarity.weights.rating", defaults.rating),
            text=get_tunable("similarity.weights.text", defaults.text),
            rating_window=get_tunable("similarity.rating_window", defaults.rating_window),
            min_token_length=get_tunable("similarity.min_token_length", defaults.min_token_length),
            precision=get_tunable("similarity.precision", defaults.precision),
        )


def tokenize(text: str) -> Set[str]:
    return set(text.lower().split())


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def text_overlap(a: str, b: str, weight: float = 0.3, min_token_length: int = 4) -> Decimal:
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    if not tokens_a or not tokens_b:
        return Decimal(0)

    common = {t for t in tokens_a & tokens_b if len(t) >= min_token_length}
    if not common:
        return Decimal(0)

    ratio = Decimal(len(common)) / Decimal(max(len(tokens_a), len(tokens_b)))
    return min(_dec(weight), ratio * _dec(weight))


def score(a: SimilarityInput, b: SimilarityInput, weights: Optional[SimilarityWeights] = None) -> float:
    if weights is None:
        weights = SimilarityWeights.from_config()

    total = Decimal(0)

    if a.category_id is not None and b.category_id is not None and a.category_id == b.category_id:
        total += _dec(weights.category)

    if a.pricing_type == b.pricing_type:
        total += _dec(weights.pricing)

    rating_diff = abs(_dec(a.rating or 0.0) - _dec(b.rating or 0.0))
    if rating_diff <= _dec(weights.rating_window):
        total += _dec(weights.rating)

    total += text_overlap(a.text, b.text, weights.text, weights.min_token_length)

    total = min(total, Decimal(1))
    quantum = Decimal(1).scaleb(-weights.precision)
    return float(total.quantize(quantum, rounding=ROUND_HALF_UP))


def feature_similarity(features_a: Iterable[str], features_b: Iterable[str]) -> float:
    set_a = {f.strip().lower() for f in features_a if f and f.strip()}
    set_b = {f.strip().lower() for f in features_b if f and f.strip()}

    union = set_a | set_b
    if not union:
        return 0.0

    return len(set_a & set_b) / len(union)
