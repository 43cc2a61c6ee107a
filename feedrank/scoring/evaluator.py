
import logging
import math
from numbers import Real
from typing import Any, Optional

from feedrank.context import CandidateItem
from feedrank.scoring.registry import ScoringFactorDefinition

logger = logging.getLogger(__name__)


def feature_bucket(value: Any) -> Optional[int]:
    """
    完全一致のステップ検索に使う整数キー。

    欠損・非数値・非有限・非整数の値はNone（一致なし）を返す。
    1.0 は 1 になるが、1.5 はどこにも一致しない。
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, Real):
        try:
            value = float(value)
        except (TypeError, ValueError):
            logger.debug("Unusable feature value %r", value)
            return None
    if isinstance(value, int):
        return value
    value = float(value)
    if not math.isfinite(value) or not value.is_integer():
        return None
    return int(value)


def evaluate_factor(definition: ScoringFactorDefinition, item: CandidateItem) -> float:
    """1候補に対する1ファクターの重み。特徴量が無ければfallback"""
    value = item.feature_values.get(definition.feature_key)
    return definition.weight_for(feature_bucket(value))
