
import json
import logging
import time
import boto3
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, FrozenSet

from feedrank.context import ScoringConfiguration
from feedrank.ranker.weighted import DEFAULT_NUMBER_OF_ARTICLES
from feedrank.scoring.registry import DEFAULT_USER_EXPERIENCE_LEVEL

logger = logging.getLogger(__name__)

PARAM_PREFIX = '/feed/weighted'

@dataclass
class FeedConfig:
    selected_factors: FrozenSet[str] = frozenset()
    default_user_experience_level: int = DEFAULT_USER_EXPERIENCE_LEVEL
    number_of_articles: int = DEFAULT_NUMBER_OF_ARTICLES
    parallel_enabled: bool = False
    factor_overrides: Dict[str, Any] = field(default_factory=dict)

    def to_scoring_configuration(self, user_id: Optional[Any] = None, **context_parameters: Any) -> ScoringConfiguration:
        params = {
            'user_id': user_id,
            'default_user_experience_level': self.default_user_experience_level,
            **context_parameters,
        }
        return ScoringConfiguration(
            selected_factors=self.selected_factors,
            factor_overrides=self.factor_overrides,
            context_parameters=params,
        )

class ConfigManager:
    def __init__(self, ttl_seconds: float = 60.0):
        self.ttl_seconds = ttl_seconds
        self._cached_config: Optional[FeedConfig] = None
        self._last_fetched_at: float = 0.0
        self._ssm_client = boto3.client('ssm')

    def get_config(self) -> FeedConfig:
        current_time = time.time()

        if self._cached_config and (current_time - self._last_fetched_at < self.ttl_seconds):
            return self._cached_config

        try:
            config = self._fetch_from_ssm()
            self._cached_config = config
            self._last_fetched_at = current_time
            return config
        except Exception as e:
            logger.warning("Error fetching feed config, using defaults: %s", e)
            return self._get_default_config()

    def _fetch_from_ssm(self) -> FeedConfig:
        names = [
            f'{PARAM_PREFIX}/selected_factors',
            f'{PARAM_PREFIX}/default_user_experience_level',
            f'{PARAM_PREFIX}/number_of_articles',
            f'{PARAM_PREFIX}/parallel_enabled',
            f'{PARAM_PREFIX}/factor_overrides',
        ]

        response = self._ssm_client.get_parameters(Names=names)
        params = {p['Name']: p['Value'] for p in response.get('Parameters', [])}

        # comma separated; empty means every registered factor
        selected_str = params.get(f'{PARAM_PREFIX}/selected_factors', '')
        selected_factors = frozenset(n.strip() for n in selected_str.split(',') if n.strip())

        level = int(params.get(f'{PARAM_PREFIX}/default_user_experience_level', DEFAULT_USER_EXPERIENCE_LEVEL))
        number_of_articles = int(params.get(f'{PARAM_PREFIX}/number_of_articles', DEFAULT_NUMBER_OF_ARTICLES))

        parallel_str = params.get(f'{PARAM_PREFIX}/parallel_enabled', 'false').lower()
        parallel_enabled = parallel_str == 'true'

        overrides = json.loads(params.get(f'{PARAM_PREFIX}/factor_overrides', '{}'))
        if not isinstance(overrides, dict):
            raise ValueError("factor_overrides must be a JSON object")

        return FeedConfig(
            selected_factors=selected_factors,
            default_user_experience_level=level,
            number_of_articles=number_of_articles,
            parallel_enabled=parallel_enabled,
            factor_overrides=overrides,
        )

    def _get_default_config(self) -> FeedConfig:
        # 安全側に倒す(全ファクター, 逐次実行, 上書きなし)
        return FeedConfig()
