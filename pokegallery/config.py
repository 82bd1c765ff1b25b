from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Pokémon Gallery"
    debug: bool = False

    api_base_url: str = "https://nestjs-pokedex-api.vercel.app"
    items_path: str = "/pokemons"
    request_timeout: float = 12.0
    user_agent: str = "PokeGallery/1.0"

    # Page size selector (the gallery offers these batch sizes)
    default_page_size: int = 50
    allowed_page_sizes: tuple[int, ...] = (10, 25, 50, 100)

    # Scroll trigger: sentinel margin in layout units, debounce in seconds
    scroll_margin: float = 200.0
    scroll_debounce: float = 0.3

    # Seconds before a failed page fetch returns the controller to idle
    recovery_delay: float = 5.0

    # Detail view retries (delays grow linearly: 2s, 4s, 6s)
    detail_max_attempts: int = 3
    detail_retry_base_delay: float = 2.0

    # Gallery sessions idle longer than this (seconds) are closed and dropped
    session_ttl: float = 1800.0
    session_sweep_interval: float = 60.0


settings = Settings()


# =============================================================================
# WIRE VOCABULARY
# =============================================================================

# Keys under which a list response may carry its records
PAGE_LIST_KEYS = ("results", "pokemons", "data", "items")

# Keys under which a list response may report the total record count
TOTAL_COUNT_KEYS = ("count", "total", "totalCount", "total_count")

# Placeholder for category/stat/ability/move references with no usable name
UNKNOWN_CATEGORY = "unknown"

# Category used for theming when a record has none
DEFAULT_PRIMARY_CATEGORY = "normal"
