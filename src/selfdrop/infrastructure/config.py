"""Configuration for SelfDrop.

All settings come from ``SELFDROP_*`` environment variables, with defaults
suitable for local use.  The composition root is the only consumer.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

ENV_PREFIX = "SELFDROP_"


class ConfigurationError(Exception):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    currency: str = "NPR"
    free_delivery_threshold: Decimal = Decimal("2000")
    flat_delivery_charge: Decimal = Decimal("100")
    delivery_base_fee: Decimal = Decimal("50")
    delivery_rate_per_km: Decimal = Decimal("20")
    delivery_max_km: float = 25.0
    origin_lat: float = 27.7172
    origin_lng: float = 85.3240
    dispatch_max_attempts: int = 3
    low_stock_threshold: int = 5
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def raw(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value is not None and value.strip() else None

        def decimal(name: str, default: Decimal) -> Decimal:
            value = raw(name)
            if value is None:
                return default
            try:
                parsed = Decimal(value)
            except InvalidOperation as exc:
                raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from exc
            if parsed < 0:
                raise ConfigurationError(f"{ENV_PREFIX}{name} cannot be negative")
            return parsed

        def number(name: str, default, kind):
            value = raw(name)
            if value is None:
                return default
            try:
                return kind(value)
            except ValueError as exc:
                raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from exc

        log_format = (raw("LOG_FORMAT") or defaults.log_format).lower()
        if log_format not in ("console", "json"):
            raise ConfigurationError(f"{ENV_PREFIX}LOG_FORMAT must be 'console' or 'json'")

        return cls(
            data_dir=Path(raw("DATA_DIR") or defaults.data_dir),
            currency=(raw("CURRENCY") or defaults.currency).upper(),
            free_delivery_threshold=decimal("FREE_DELIVERY_THRESHOLD", defaults.free_delivery_threshold),
            flat_delivery_charge=decimal("FLAT_DELIVERY_CHARGE", defaults.flat_delivery_charge),
            delivery_base_fee=decimal("DELIVERY_BASE_FEE", defaults.delivery_base_fee),
            delivery_rate_per_km=decimal("DELIVERY_RATE_PER_KM", defaults.delivery_rate_per_km),
            delivery_max_km=number("DELIVERY_MAX_KM", defaults.delivery_max_km, float),
            origin_lat=number("ORIGIN_LAT", defaults.origin_lat, float),
            origin_lng=number("ORIGIN_LNG", defaults.origin_lng, float),
            dispatch_max_attempts=number("DISPATCH_MAX_ATTEMPTS", defaults.dispatch_max_attempts, int),
            low_stock_threshold=number("LOW_STOCK_THRESHOLD", defaults.low_stock_threshold, int),
            log_level=(raw("LOG_LEVEL") or defaults.log_level).upper(),
            log_format=log_format,
        )
