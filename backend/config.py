"""Centralized configuration: all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Disk cache
        self.cache_dir: str = os.getenv("CACHE_DIR", "cache")
        self.cache_ttl_minutes: int = int(os.getenv("CACHE_TTL_MINUTES", "60"))
        self.gem_colors_ttl_minutes: int = int(os.getenv("GEM_COLORS_TTL_MINUTES", "1440"))

        # Upstream providers
        self.http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        self.user_agent: str = os.getenv("USER_AGENT", "poe-gem-calculator/0.1.0")
        self.leagues_url: str = os.getenv(
            "LEAGUES_URL", "https://api.pathofexile.com/leagues?type=main&realm=pc"
        )
        self.poe_ninja_url: str = os.getenv(
            "POE_NINJA_URL", "https://poe.ninja/api/data/itemoverview"
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty when all is well)."""
        problems = []
        for attr in ("cache_ttl_minutes", "gem_colors_ttl_minutes", "http_timeout_seconds"):
            if getattr(self, attr) <= 0:
                problems.append(f"{attr} must be positive, got {getattr(self, attr)}")
        if not self.cache_dir:
            problems.append("cache_dir must not be empty")
        return problems


settings = Settings()
