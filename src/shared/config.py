"""Application settings.

Settings are read from ``marketplace.toml`` next to the source packages. The
``[default]`` table is overlaid with the table named by ``MARKET_ENV``
(``development``, ``test`` or ``production``), and any key can finally be
overridden by a ``MARKET_<KEY>`` environment variable or a ``.env`` file.
"""

import os
import tomllib
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

CONFIG_PATH = Path(__file__).resolve().parent.parent / "marketplace.toml"

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MARKET_", env_file=".env", extra="ignore", frozen=True)

    env: str = "development"
    database_uri: str = "sqlite:///agrimarket.db"
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiry_days: int = 7
    delivery_fee: float = 50.0
    tax_rate: float = 0.05
    currency: str = "INR"
    reservation_retries: int = 5
    retry_backoff_seconds: float = 0.02
    product_list_limit: int = 50
    log_level: str = "INFO"
    log_dir: str | None = None
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings):
        # Environment beats the TOML tables handed in as init values
        return env_settings, dotenv_settings, init_settings

    def with_overrides(self, **overrides: Any) -> "Settings":
        return self.model_copy(update=overrides)


def load_settings(env: str | None = None, path: Path | None = None) -> Settings:
    """Build ``Settings`` for the given environment."""
    env = (env or os.getenv("MARKET_ENV") or "development").lower()
    path = path or CONFIG_PATH

    values: dict[str, Any] = {}
    if path.exists():
        with path.open("rb") as fh:
            document = tomllib.load(fh)
        values.update(document.get("default", {}))
        values.update(document.get(env, {}))

    known = set(Settings.model_fields) - {"env"}
    settings = Settings(**{k: v for k, v in values.items() if k in known}).with_overrides(env=env)

    if settings.env == "production" and settings.jwt_secret == DEFAULT_JWT_SECRET:
        raise RuntimeError("MARKET_JWT_SECRET must be set in production")

    return settings
