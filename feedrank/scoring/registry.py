
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

DEFAULT_USER_EXPERIENCE_LEVEL = 5


class ConfigurationError(ValueError):
    """ファクター定義が不正。ロード時にのみ送出される"""


@dataclass(frozen=True)
class ScoringStep:
    threshold: int
    weight: float


@dataclass(frozen=True)
class ScoringFactorDefinition:
    """
    1つのスコアリングファクター。1つの特徴量に対するステップ関数。

    整数の閾値との完全一致で引く。どの閾値にも一致しない値は
    fallback_weight になる（区間マッチはしない）。
    """
    name: str
    feature_key: str
    steps: Tuple[ScoringStep, ...]
    fallback_weight: float

    def weight_for(self, bucket: Optional[int]) -> float:
        if bucket is not None:
            for step in self.steps:
                if step.threshold == bucket:
                    return step.weight
        return self.fallback_weight


def _to_threshold(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name}: threshold must be numeric, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ConfigurationError(f"{name}: threshold must be numeric, got {value!r}") from e


def _to_weight(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name}: weight must be numeric, got {value!r}")
    try:
        weight = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name}: weight must be numeric, got {value!r}") from e
    # 重みは有限値のみ (NaN, inf は不可)
    if not math.isfinite(weight):
        raise ConfigurationError(f"{name}: weight must be finite, got {value!r}")
    return weight


def build_definition(
    name: str,
    feature_key: str,
    steps: Iterable[Sequence[Any]],
    fallback_weight: Any,
) -> ScoringFactorDefinition:
    """
    生のファクター定義を正規化する。

    閾値はintに切り捨て、重みはfloatに変換する。
    閾値の重複や数値でない・有限でない値はConfigurationErrorになる。
    """
    if not name:
        raise ConfigurationError("factor name is required")
    if not feature_key:
        raise ConfigurationError(f"{name}: feature_key is required")
    if steps is None or isinstance(steps, (str, bytes)):
        raise ConfigurationError(f"{name}: steps must be a sequence of (threshold, weight) pairs")

    normalised: List[ScoringStep] = []
    seen = set()
    try:
        pairs = list(steps)
    except TypeError as e:
        raise ConfigurationError(f"{name}: steps must be a sequence of (threshold, weight) pairs") from e

    for pair in pairs:
        try:
            raw_threshold, raw_weight = pair
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{name}: malformed step {pair!r}") from e
        threshold = _to_threshold(name, raw_threshold)
        if threshold in seen:
            raise ConfigurationError(f"{name}: duplicate threshold {threshold}")
        seen.add(threshold)
        normalised.append(ScoringStep(threshold=threshold, weight=_to_weight(name, raw_weight)))

    return ScoringFactorDefinition(
        name=name,
        feature_key=feature_key,
        steps=tuple(normalised),
        fallback_weight=_to_weight(name, fallback_weight),
    )


class FactorRegistry:
    """
    名前をキーにした固定のファクター一覧。
    宣言順がそのまま評価順になる。
    """
    def __init__(self, definitions: Iterable[ScoringFactorDefinition]):
        by_name: Dict[str, ScoringFactorDefinition] = {}
        for definition in definitions:
            if definition.name in by_name:
                raise ConfigurationError(f"duplicate factor name: {definition.name}")
            by_name[definition.name] = definition
        self._definitions: Tuple[ScoringFactorDefinition, ...] = tuple(by_name.values())
        self._by_name = by_name

    def names(self) -> List[str]:
        return [d.name for d in self._definitions]

    def get(self, name: str) -> Optional[ScoringFactorDefinition]:
        return self._by_name.get(name)

    def __iter__(self) -> Iterator[ScoringFactorDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


DEFAULT_REGISTRY = FactorRegistry([
    # 公開からの経過日数
    build_definition(
        "daily_decay_factor", "days_since_published",
        [(0, 1), (1, 0.95), (2, 0.9),
         (3, 0.85), (4, 0.8), (5, 0.75),
         (6, 0.7), (7, 0.65), (8, 0.6),
         (9, 0.55), (10, 0.5), (11, 0.4),
         (12, 0.3), (13, 0.2), (14, 0.1)],
        0,
    ),
    build_definition("spaminess_factor", "spaminess_rating", [(0, 1)], 0.05),
    # 記事とユーザーの経験レベルの差
    build_definition(
        "experience_factor", "experience_level_distance",
        [(0, 1), (1, 0.98), (2, 0.97), (3, 0.96), (4, 0.95), (5, 0.94)],
        0.93,
    ),
    # フォロー中のユーザーによるコメント数
    build_definition(
        "comment_count_by_those_followed_factor", "comments_by_followed_count",
        [(0, 0.95), (1, 0.98), (2, 0.99)],
        0.93,
    ),
    build_definition(
        "latest_comment_factor", "days_since_latest_followed_comment",
        [(0, 1), (1, 0.9988)],
        0.988,
    ),
    # ユーザーがフォローしているタグと記事のタグの一致数
    build_definition("matching_tags_factor", "matching_tags_count", [(0, 0.4), (1, 0.9)], 1),
    build_definition("following_author_factor", "following_author_count", [(0, 0.8), (1, 1)], 1),
    build_definition(
        "comments_count_factor", "comments_count",
        [(0, 0.9), (1, 0.94), (2, 0.95), (3, 0.98), (4, 0.999)],
        1,
    ),
    build_definition(
        "reactions_factor", "reactions_count",
        [(0, 0.9988), (1, 0.9988), (2, 0.9988), (3, 0.9988)],
        1,
    ),
    build_definition("following_org_factor", "following_org_count", [(0, 0.95), (1, 1)], 1),
])
