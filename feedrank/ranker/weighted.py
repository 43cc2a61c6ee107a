
import logging
from typing import Any, List, Optional, Sequence

from feedrank.context import CandidateItem, ScoredItem, ScoringConfiguration
from feedrank.ranker.base import Ranker
from feedrank.scoring.composite import score_candidates
from feedrank.scoring.registry import DEFAULT_REGISTRY, FactorRegistry, ScoringFactorDefinition
from feedrank.scoring.selector import select_factors

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_OF_ARTICLES = 50


class WeightedRelevanceRanker(Ranker):
    """
    固定のファクターレジストリによる乗算型の関連度ランキング。

    上位N件に入るかどうかは関連度で決め、表示順は新しさで決める。
    """
    def __init__(
        self,
        registry: FactorRegistry = DEFAULT_REGISTRY,
        parallel: bool = False,
        max_workers: Optional[int] = None,
    ):
        self.registry = registry
        self.parallel = parallel
        self.max_workers = max_workers

    def active_factors(self, config: Optional[ScoringConfiguration] = None) -> List[ScoringFactorDefinition]:
        config = config or ScoringConfiguration()
        return select_factors(self.registry, config.selected_factors, config.factor_overrides)

    def rank_items(
        self,
        candidates: Sequence[CandidateItem],
        config: Optional[ScoringConfiguration] = None,
        page_size: int = DEFAULT_NUMBER_OF_ARTICLES,
        page: int = 1,
        factors: Optional[Sequence[ScoringFactorDefinition]] = None,
    ) -> List[ScoredItem]:
        """
        factors を渡した場合は解決済みの一覧としてそのまま使う。
        """
        page_size = int(page_size)
        # ページに関係なく、常に上位 page_size 件の窓
        page = int(page)

        if not candidates or page_size <= 0:
            return []

        if factors is None:
            factors = self.active_factors(config)
        scored = score_candidates(
            factors, list(candidates), parallel=self.parallel, max_workers=self.max_workers
        )

        # sorted() は安定ソートなので、完全な同点は入力順のまま
        by_relevance = sorted(
            scored, key=lambda s: (s.composite_score, s.published_at), reverse=True
        )
        window = by_relevance[:page_size]
        result = sorted(window, key=lambda s: s.published_at, reverse=True)

        logger.debug(
            "Ranked %d of %d candidates with %d factors (page=%d)",
            len(result), len(scored), len(factors), page,
        )
        return result

    def rank(
        self,
        candidates: Sequence[CandidateItem],
        config: Optional[ScoringConfiguration] = None,
        page_size: int = DEFAULT_NUMBER_OF_ARTICLES,
        page: int = 1,
    ) -> List[Any]:
        return [s.id for s in self.rank_items(candidates, config, page_size, page)]


def rank(
    candidates: Sequence[CandidateItem],
    config: Optional[ScoringConfiguration] = None,
    page_size: int = DEFAULT_NUMBER_OF_ARTICLES,
    page: int = 1,
    registry: FactorRegistry = DEFAULT_REGISTRY,
    parallel: bool = False,
) -> List[Any]:
    return WeightedRelevanceRanker(registry=registry, parallel=parallel).rank(
        candidates, config, page_size, page
    )
