
import uuid
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from feedrank.config import ConfigManager
from feedrank.observability.logging import log_ranking_result
from feedrank.ranker.adapter import LambdaCandidateSource
from feedrank.ranker.weighted import WeightedRelevanceRanker
from feedrank.scoring.registry import DEFAULT_REGISTRY, FactorRegistry


def handle_feed_request(
    user_id: Any,
    fetch_func: Callable[[Dict[str, Any]], List[Dict[str, Any]]],
    config_manager: ConfigManager,
    page: int = 1,
    number_of_articles: Optional[int] = None,
    registry: FactorRegistry = DEFAULT_REGISTRY,
    today: Optional[date] = None,
    **context_parameters: Any,
) -> List[Any]:
    """
    パーソナライズされたフィードを1ページ分生成する。

    1. フィード設定を取得（SSMパラメータ、キャッシュあり）
    2. データ層から候補を取得
    3. ランキングしてログ出力
    """
    feed_config = config_manager.get_config()
    scoring_config = feed_config.to_scoring_configuration(user_id, **context_parameters)
    page_size = number_of_articles if number_of_articles is not None else feed_config.number_of_articles

    source = LambdaCandidateSource(fetch_func, today=today)
    candidates = source.fetch(scoring_config.context_parameters)

    ranker = WeightedRelevanceRanker(registry=registry, parallel=feed_config.parallel_enabled)
    factors = ranker.active_factors(scoring_config)
    items = ranker.rank_items(candidates, scoring_config, page_size=page_size, page=page, factors=factors)

    ranking_id = str(uuid.uuid4())
    log_ranking_result(ranking_id, scoring_config, factors, items)

    return [item.id for item in items]
