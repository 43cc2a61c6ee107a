
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional
from feedrank.context import CandidateItem
from feedrank.scoring.registry import DEFAULT_USER_EXPERIENCE_LEVEL

logger = logging.getLogger(__name__)

# データ層の行にそのまま入っているカウント系の特徴量
COUNT_FEATURES = [
    'spaminess_rating',
    'comments_by_followed_count',
    'matching_tags_count',
    'following_author_count',
    'comments_count',
    'reactions_count',
    'following_org_count',
]

def _to_datetime(value: Any) -> Optional[datetime]:
    """
    datetime またはISO 8601文字列を変換する。変換できなければNone。
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    # Python 3.11未満の fromisoformat は末尾の "Z" を受け付けない
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None

def _days_between(today: date, moment: Any) -> Optional[int]:
    parsed = _to_datetime(moment)
    if parsed is None:
        return None
    return (today - parsed.date()).days

def user_experience_level(context_parameters: Dict[str, Any]) -> int:
    level = context_parameters.get('user_experience_level')
    if level is None:
        level = context_parameters.get('default_user_experience_level', DEFAULT_USER_EXPERIENCE_LEVEL)
    return int(level)

def build_feature_values(
    row: Dict[str, Any],
    context_parameters: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
) -> Dict[str, float]:
    """
    データ層の生の行から、デフォルトのファクターが読む特徴量を計算する。
    入力が欠けている特徴量は含めない（スコアリング時にfallbackになる）。
    """
    context_parameters = context_parameters or {}
    today = today or date.today()
    features: Dict[str, float] = {}

    days = _days_between(today, row.get('published_at'))
    if days is not None:
        features['days_since_published'] = days

    days = _days_between(today, row.get('latest_followed_comment_at'))
    if days is not None:
        features['days_since_latest_followed_comment'] = days

    if row.get('experience_level_rating') is not None:
        features['experience_level_distance'] = abs(
            row['experience_level_rating'] - user_experience_level(context_parameters)
        )

    for key in COUNT_FEATURES:
        if row.get(key) is not None:
            features[key] = row[key]

    return features

class LambdaCandidateSource:
    """
    既存のデータ取得関数をラップし、CandidateItemのリストに変換するアダプター
    """
    def __init__(
        self,
        fetch_func: Callable[[Dict[str, Any]], List[Dict[str, Any]]],
        today: Optional[date] = None,
    ):
        self.fetch_func = fetch_func
        self.today = today

    def fetch(self, context_parameters: Optional[Dict[str, Any]] = None) -> List[CandidateItem]:
        context_parameters = dict(context_parameters or {})
        raw_rows = self.fetch_func(context_parameters)

        items = []
        for raw in raw_rows:
            # 公開日時はランキングの並び順に必須。無い行はスキップする
            published_at = _to_datetime(raw.get('published_at'))
            if published_at is None:
                logger.warning("Skipping candidate %r without a usable published_at", raw.get('id'))
                continue

            # 既に計算済みの特徴量があれば、それを優先する
            features = build_feature_values(raw, context_parameters, self.today)
            features.update(raw.get('feature_values') or {})

            items.append(CandidateItem(
                id=raw.get('id'),
                published_at=published_at,
                feature_values=features,
            ))

        return items
