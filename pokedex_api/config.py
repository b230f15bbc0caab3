"""
Runtime configuration read from environment variables.

Values are resolved once per process by ``get_settings``. Tests that patch the
environment should call ``get_settings.cache_clear()`` before building the app.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache


def _env_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    pokeapi_url: str = field(default_factory=lambda: os.getenv("POKEAPI_URL", "https://pokeapi.co/api/v2"))
    pokemon_list_cache_key: str = field(default_factory=lambda: os.getenv("POKEMON_LIST_CACHE_KEY", "pokemon_list"))
    pokemon_image_url: str = field(
        default_factory=lambda: os.getenv(
            "POKEMON_IMAGE_URL",
            "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon",
        )
    )
    pokemon_official_image_url: str = field(
        default_factory=lambda: os.getenv(
            "POKEMON_OFFICIAL_IMAGE_URL",
            "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/official-artwork",
        )
    )
    cache_ttl_ms: int = field(default_factory=lambda: int(os.getenv("CACHE_TTL_MS", "3600000")))

    redis_host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    redis_port: int = field(default_factory=lambda: int(os.getenv("REDIS_PORT", "6379")))
    # Wins over REDIS_HOST/REDIS_PORT when set
    redis_url_override: str | None = field(default_factory=lambda: os.getenv("REDIS_URL"))

    database_path: str = field(default_factory=lambda: os.getenv("DATABASE_PATH", "favorites.db"))
    # False: favorite names are lowercased before lookup and storage
    favorites_case_sensitive: bool = field(default_factory=lambda: _env_bool("FAVORITES_CASE_SENSITIVE", "false"))

    client_url: str = field(default_factory=lambda: os.getenv("CLIENT_URL", "http://localhost:5173"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3001")))
    # Global per-client request limit, in limits notation
    rate_limit: str = field(default_factory=lambda: os.getenv("RATE_LIMIT", "100/minute"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def redis_url(self) -> str:
        if self.redis_url_override:
            return self.redis_url_override
        return f"redis://{self.redis_host}:{self.redis_port}"

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.database_path}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
