from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Omenpath"
    debug: bool = False

    scryfall_api_url: str = "https://api.scryfall.com"
    user_agent: str = "Omenpath/1.0"
    request_timeout: float = 30.0

    # Scryfall asks for 50-100ms between requests
    request_delay: float = 0.1

    # Hard cap of the /cards/collection endpoint
    batch_size: int = 75

    # Detection heuristics, tuned against real exports
    detection_min_score: float = 0.6
    detection_min_margin: float = 0.2

    set_match_threshold: float = 0.7

    sets_cache_path: Path = DATA_DIR / "sets.json"


settings = Settings()
