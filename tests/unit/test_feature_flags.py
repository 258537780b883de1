import pytest

from botpanel.utils.feature_flags import (
    FeatureFlagKey,
    embedding_on_write_enabled,
    get_feature_flags,
    is_feature_enabled,
    refresh_feature_flag_cache,
)

_ENV_FLAG_MAPPING = {
    "AI_CONFIG_ENABLED": "ai_config_enabled",
    "CONVERSATION_CONTEXT_ENABLED": "conversation_context_enabled",
    "WELCOME_TRACKING_ENABLED": "welcome_tracking_enabled",
    "EMBEDDING_ON_WRITE_ENABLED": "embedding_on_write_enabled",
}


@pytest.fixture(autouse=True)
def reset_flags(monkeypatch):
    """Clear env + cached values for each test to avoid cross-contamination."""
    for env_name in _ENV_FLAG_MAPPING:
        monkeypatch.delenv(env_name, raising=False)
    refresh_feature_flag_cache()
    yield
    refresh_feature_flag_cache()


def test_get_feature_flags_defaults_true():
    assert get_feature_flags() == {key: True for key in _ENV_FLAG_MAPPING.values()}


@pytest.mark.parametrize(
    "env_name,flag_key",
    list(_ENV_FLAG_MAPPING.items()),
)
def test_individual_flag_disabled_via_env(monkeypatch, env_name: str, flag_key: FeatureFlagKey):
    monkeypatch.setenv(env_name, "false")
    refresh_feature_flag_cache()

    assert get_feature_flags()[flag_key] is False
    assert is_feature_enabled(flag_key) is False


@pytest.mark.parametrize("raw_value", ["maybe", "junk", "2", None])
def test_invalid_value_falls_back_to_default(monkeypatch, raw_value):
    env_name = "EMBEDDING_ON_WRITE_ENABLED"
    if raw_value is None:
        monkeypatch.delenv(env_name, raising=False)
    else:
        monkeypatch.setenv(env_name, raw_value)
    refresh_feature_flag_cache()

    assert embedding_on_write_enabled() is True


def test_refresh_feature_flag_cache_forces_reload(monkeypatch):
    monkeypatch.setenv("AI_CONFIG_ENABLED", "off")
    refresh_feature_flag_cache()
    assert get_feature_flags()["ai_config_enabled"] is False

    # Update env without clearing cache; still should read stale value
    monkeypatch.setenv("AI_CONFIG_ENABLED", "on")
    assert get_feature_flags()["ai_config_enabled"] is False

    refresh_feature_flag_cache()
    assert get_feature_flags()["ai_config_enabled"] is True
