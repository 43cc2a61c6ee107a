
import concurrent.futures
from typing import List, Optional, Sequence

from feedrank.context import CandidateItem, ScoredItem
from feedrank.scoring.evaluator import evaluate_factor
from feedrank.scoring.registry import ScoringFactorDefinition


def composite_score(factors: Sequence[ScoringFactorDefinition], item: CandidateItem) -> float:
    """
    有効な全ファクターの重みの積（宣言順）。

    各ファクターは満点1に対するペナルティの乗数として働く。
    結果はクランプしない。
    """
    score = 1.0
    for factor in factors:
        score *= evaluate_factor(factor, item)
    return score


def _score_one(factors: Sequence[ScoringFactorDefinition], item: CandidateItem) -> ScoredItem:
    return ScoredItem(
        id=item.id,
        composite_score=composite_score(factors, item),
        published_at=item.published_at,
    )


def score_candidates(
    factors: Sequence[ScoringFactorDefinition],
    candidates: Sequence[CandidateItem],
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> List[ScoredItem]:
    """
    全候補をスコアリングする。
    並列モードでも出力順は入力順と同じ。
    """
    if not parallel or len(candidates) < 2:
        return [_score_one(factors, item) for item in candidates]

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_score_one, factors, item) for item in candidates]
        return [future.result() for future in futures]
