"""TOML configuration loader."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .schedule import parse_weekday

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

DEFAULT_DB_PATH = "~/.config/restock/inventory.db"


@dataclass
class DeliveryConfig:
    first_day: str = "monday"  # stocks to the weekday par
    second_day: str = "thursday"  # stocks to the weekend par
    urgent_within_days: int = 1

    @property
    def first_weekday(self) -> int:
        return parse_weekday(self.first_day)

    @property
    def second_weekday(self) -> int:
        return parse_weekday(self.second_day)


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH
    timeout: float = 5.0


@dataclass
class SchedulerConfig:
    # Morning before each truck by default (Sunday and Wednesday)
    order_check_schedule: str = "0 7 * * sun,wed"


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class RestockConfig:
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> RestockConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path and log level can be overridden via RESTOCK_DB_PATH
    and RESTOCK_LOG_LEVEL.

    Raises:
        ValueError: If a delivery day is not a weekday name or both
            delivery days are the same.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    dlv = raw.get("delivery", {})
    dbs = raw.get("database", {})
    sch = raw.get("scheduler", {})
    log = raw.get("logging", {})

    db_path = os.environ.get("RESTOCK_DB_PATH") or dbs.get("path", DEFAULT_DB_PATH)
    log_level = os.environ.get("RESTOCK_LOG_LEVEL") or log.get("level", "INFO")

    delivery = DeliveryConfig(
        first_day=str(dlv.get("first_day", "monday")),
        second_day=str(dlv.get("second_day", "thursday")),
        urgent_within_days=int(dlv.get("urgent_within_days", 1)),
    )
    if delivery.first_weekday == delivery.second_weekday:
        raise ValueError(
            f"delivery days must differ: {delivery.first_day} / {delivery.second_day}"
        )

    return RestockConfig(
        delivery=delivery,
        database=DatabaseConfig(
            path=db_path,
            timeout=float(dbs.get("timeout", 5.0)),
        ),
        scheduler=SchedulerConfig(
            order_check_schedule=sch.get("order_check_schedule", "0 7 * * sun,wed"),
        ),
        logging=LoggingConfig(level=str(log_level).upper()),
    )
