# storefront/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List, Optional


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _database_url_from_env() -> str:
    url = (os.getenv("DATABASE_URL") or "").strip()
    if url:
        # Heroku/Render style urls
        if url.startswith("postgres://"):
            url = "postgresql+psycopg2://" + url[len("postgres://"):]
        return url
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "kingicegold")
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "postgres")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./kingicegold.db"
    db_pool_size: int = 20
    db_pool_timeout: float = 2.0
    sql_echo: bool = False

    secret_key: str = "kingice-dev-secret-change-me"
    access_expire_min: int = 60 * 24

    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    frontend_dir: Optional[Path] = None

    order_number_prefix: str = "KIG"
    order_number_function: Optional[str] = None
    default_shipping_cost: Decimal = Decimal("150.00")
    default_payment_method: str = "oxxo"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        frontend = os.getenv("FRONTEND_DIR")
        return cls(
            database_url=_database_url_from_env(),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
            db_pool_timeout=float(os.getenv("DB_POOL_TIMEOUT", "2")),
            sql_echo=_env_bool("SQL_ECHO"),
            secret_key=os.getenv("SECRET_KEY", cls.secret_key),
            access_expire_min=int(os.getenv("ACCESS_EXPIRE_MIN", str(60 * 24))),
            environment=os.getenv("ENVIRONMENT", "development").strip().lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=origins or ["*"],
            frontend_dir=Path(frontend) if frontend else None,
            order_number_prefix=os.getenv("ORDER_NUMBER_PREFIX", "KIG"),
            order_number_function=os.getenv("ORDER_NUMBER_FUNCTION") or None,
            default_shipping_cost=Decimal(os.getenv("DEFAULT_SHIPPING_COST", "150.00")),
            default_payment_method=os.getenv("DEFAULT_PAYMENT_METHOD", "oxxo"),
        )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
