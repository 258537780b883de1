"""Feature flag helpers for runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Literal, TypedDict, cast


FeatureFlagKey = Literal[
    "ai_config_enabled",
    "conversation_context_enabled",
    "welcome_tracking_enabled",
    "embedding_on_write_enabled",
]


class FeatureFlagValues(TypedDict):
    ai_config_enabled: bool
    conversation_context_enabled: bool
    welcome_tracking_enabled: bool
    embedding_on_write_enabled: bool


@dataclass(frozen=True)
class FeatureFlagDefinition:
    env_var: str
    default: bool


_FEATURE_FLAG_DEFINITIONS: Dict[FeatureFlagKey, FeatureFlagDefinition] = {
    "ai_config_enabled": FeatureFlagDefinition("AI_CONFIG_ENABLED", True),
    "conversation_context_enabled": FeatureFlagDefinition("CONVERSATION_CONTEXT_ENABLED", True),
    "welcome_tracking_enabled": FeatureFlagDefinition("WELCOME_TRACKING_ENABLED", True),
    "embedding_on_write_enabled": FeatureFlagDefinition("EMBEDDING_ON_WRITE_ENABLED", True),
}


def _normalize_bool(value: str | None, default: bool = True) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


@lru_cache(maxsize=None)
def get_feature_flags() -> FeatureFlagValues:
    """Return the cached feature flag state sourced from the environment."""
    values: Dict[FeatureFlagKey, bool] = {}
    for key, definition in _FEATURE_FLAG_DEFINITIONS.items():
        values[key] = _normalize_bool(os.getenv(definition.env_var), default=definition.default)
    return cast(FeatureFlagValues, values)


def is_feature_enabled(flag: FeatureFlagKey) -> bool:
    """Return whether the supplied feature flag evaluates to true."""
    return get_feature_flags()[flag]


def embedding_on_write_enabled() -> bool:
    """Embed prompt text inline on create/update."""
    return is_feature_enabled("embedding_on_write_enabled")


def refresh_feature_flag_cache() -> None:
    """Invalidate cached feature flag values (useful for tests)."""
    get_feature_flags.cache_clear()
