from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SortBy = Literal[
    "value_score",
    "price",
    "price_per_calorie",
    "price_per_protein",
    "protein_grams",
    "calories",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API remota
    API_BASE_URL: str = "http://localhost:8000/api"
    API_TIMEOUT_SECS: float = 30.0

    # Polling de jobs (2s x 120 ≈ 4 min)
    POLL_INTERVAL_MS: int = 2000
    POLL_MAX_ATTEMPTS: int = 120

    # Estado persistente (kv)
    DB_PATH: Path = Field(default=Path("./data/dealscout.db"))
    CACHE_KEY_NAME: str = "lastScrapedLocation"
    LOCATION_KEY_NAME: str = "userLocation"

    # Cadenas a importar
    DEFAULT_RESTAURANTS: list[str] = Field(default_factory=lambda: ["McDonald's", "KFC", "Taco Bell"])
    UBER_RESTAURANTS: list[str] = Field(
        default_factory=lambda: [
            "McDonald's",
            "KFC",
            "Taco Bell",
            "Wendy's",
            "Burger King",
            "Chick-fil-A",
            "Subway",
            "Popeyes",
        ]
    )

    # Listado de deals
    DEALS_LIMIT: int = 10
    DEALS_SORT_BY: SortBy = "value_score"

    # Progreso
    PROGRESS_PLACEHOLDER_PCT: int = 10
    PROGRESS_MIN_PCT_STEP: int = 10

    # Reintentos sólo para lecturas (GET /deals)
    READ_RETRY_TRIES: int = 3
    READ_RETRY_BASE_DELAY: float = 0.5

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Field(default=Path("./logs"))


settings = Settings()
