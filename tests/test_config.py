"""Tests for environment-driven settings."""

from config import Settings


def test_defaults(monkeypatch):
    """Test default values with a clean environment."""
    for var in ("CACHE_DIR", "CACHE_TTL_MINUTES", "ENVIRONMENT", "LOG_LEVEL", "CORS_ORIGINS"):
        monkeypatch.delenv(var, raising=False)
    s = Settings()
    assert s.cache_dir == "cache"
    assert s.cache_ttl_minutes == 60
    assert s.gem_colors_ttl_minutes == 1440
    assert s.log_level == "INFO"
    assert s.cors_origins == ["*"]
    assert not s.is_production
    assert s.validate() == []


def test_env_overrides(monkeypatch):
    """Test that env vars override defaults."""
    monkeypatch.setenv("CACHE_DIR", "/var/cache/poe")
    monkeypatch.setenv("CACHE_TTL_MINUTES", "15")
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test,https://b.test")
    s = Settings()
    assert s.cache_dir == "/var/cache/poe"
    assert s.cache_ttl_minutes == 15
    assert s.is_production
    assert s.log_level == "DEBUG"
    assert s.cors_origins == ["https://a.test", "https://b.test"]


def test_validate_flags_bad_values(monkeypatch):
    """Test that non-positive TTLs and timeouts are reported."""
    monkeypatch.setenv("CACHE_TTL_MINUTES", "0")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "-1")
    problems = Settings().validate()
    assert len(problems) == 2
    assert any("cache_ttl_minutes" in p for p in problems)
    assert any("http_timeout_seconds" in p for p in problems)
