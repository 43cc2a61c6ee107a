
import logging
from collections import abc
from typing import Any, Iterable, List, Mapping, Optional

from feedrank.scoring.registry import (
    ConfigurationError,
    FactorRegistry,
    ScoringFactorDefinition,
    build_definition,
)

logger = logging.getLogger(__name__)


def _resolve_override(
    default: ScoringFactorDefinition, override: Any
) -> ScoringFactorDefinition:
    if not isinstance(override, abc.Mapping) or 'steps' not in override or 'fallback_weight' not in override:
        logger.warning("Ignoring partial override for %s, using registry default", default.name)
        return default
    try:
        # feature_key は常にレジストリの値を使う。呼び出し側からは変更不可
        return build_definition(
            name=default.name,
            feature_key=default.feature_key,
            steps=override['steps'],
            fallback_weight=override['fallback_weight'],
        )
    except ConfigurationError as e:
        logger.warning("Ignoring invalid override for %s: %s", default.name, e)
        return default


def select_factors(
    registry: FactorRegistry,
    selected_factors: Optional[Iterable[str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> List[ScoringFactorDefinition]:
    """
    リクエストで使うファクターの一覧を解決する。

    レジストリの宣言順に走査し、selected_factors に含まれるものだけを残す
    （空またはNoneなら全ファクター）。未知の名前は黙って無視する。
    """
    if isinstance(selected_factors, str):
        selected_factors = [selected_factors]
    requested = set(selected_factors or ())
    overrides = overrides or {}

    unknown = requested.difference(registry.names())
    if unknown:
        logger.debug("Dropping unknown scoring factors: %s", sorted(unknown))
    # 既知の名前だけを数える。未知の名前しか無ければ全ファクター扱い
    selected = requested - unknown

    active: List[ScoringFactorDefinition] = []
    for definition in registry:
        if selected and definition.name not in selected:
            continue
        if definition.name in overrides:
            definition = _resolve_override(definition, overrides[definition.name])
        active.append(definition)
    return active
