
import json
import logging
from typing import List
from feedrank.context import ScoredItem, ScoringConfiguration
from feedrank.scoring.registry import ScoringFactorDefinition

logger = logging.getLogger("feedrank")
logger.setLevel(logging.INFO)
# Handler設定は実行環境に依存するため、ここでは標準出力への出力のみを想定
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter('%(message)s'))
logger.addHandler(handler)

def log_ranking_result(
    ranking_id: str,
    config: ScoringConfiguration,
    factors: List[ScoringFactorDefinition],
    items: List[ScoredItem],
):
    """
    ランキング結果を構造化ログ(JSON)として出力する。
    """

    log_data = {
        "event": "ranking_generated",
        "ranking_id": ranking_id,
        "user_id": config.user_id,
        "factors": [factor.name for factor in factors],
        "items": [
            {
                "id": item.id,
                "score": item.composite_score,
                "rank": i + 1,
                "published_at": item.published_at.isoformat(),
            }
            for i, item in enumerate(items)
        ]
    }

    logger.info(json.dumps(log_data, default=str))
