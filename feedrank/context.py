
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, FrozenSet, Mapping

@dataclass
class CandidateItem:
    id: Any
    published_at: datetime
    feature_values: Dict[str, float] = field(default_factory=dict)

@dataclass
class ScoredItem:
    id: Any
    composite_score: float
    published_at: datetime

@dataclass
class ScoringConfiguration:
    """
    リクエスト単位のスコアリング設定。
    selected_factors が空なら登録済みの全ファクターを使う。
    context_parameters はデータ層にそのまま渡すだけで、エンジンは解釈しない。
    """
    selected_factors: FrozenSet[str] = frozenset()
    factor_overrides: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    context_parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> Optional[Any]:
        return self.context_parameters.get('user_id')
