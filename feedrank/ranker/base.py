
from typing import Any, List, Optional, Protocol, Sequence
from feedrank.context import CandidateItem, ScoringConfiguration

class Ranker(Protocol):
    def rank(
        self,
        candidates: Sequence[CandidateItem],
        config: Optional[ScoringConfiguration] = None,
        page_size: int = 50,
        page: int = 1,
    ) -> List[Any]:
        """
        候補アイテムを受け取り、表示順に並べたアイテムIDのリストを返す
        """
        ...
