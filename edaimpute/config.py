"""
Configuration Management

Imputation settings loaded from environment variables (prefix ``EDAIMPUTE_``)
or a ``.env`` file, validated with Pydantic, plus a logging helper for
scripts and notebooks that want console/file output.
"""

import logging
import os
from functools import lru_cache
from logging import Handler
from logging.handlers import RotatingFileHandler
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure logging for the ``edaimpute`` logger hierarchy.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL), defaults
            to the LOG_LEVEL setting
        log_file: Optional path to a rotating log file (creates directory if needed)
        max_bytes: Maximum size of the log file before rotation
        backup_count: Number of rotated files to keep
    """
    if log_level is None:
        log_level = get_settings().LOG_LEVEL
    level = getattr(logging, log_level.upper(), logging.INFO)
    package_logger = logging.getLogger("edaimpute")
    package_logger.setLevel(level)

    # Remove handlers installed by a previous call to prevent duplicates
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    package_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler: Handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)8s] %(name)s: %(message)s "
                "[%(filename)s:%(lineno)d in %(funcName)s()]"
            )
        )
        package_logger.addHandler(file_handler)

    package_logger.info(f"Logging initialized. Level: {log_level}, file: {log_file}")


class Settings(BaseSettings):
    """Tunable constants of the imputation strategies."""

    model_config = SettingsConfigDict(
        env_prefix="EDAIMPUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # === K-NEAREST NEIGHBORS ===
    KNN_NEIGHBORS: int = 10

    # === DECISION TREE (rpart) ===
    TREE_MIN_SAMPLES_SPLIT: int = 20
    TREE_MIN_SAMPLES_LEAF: int = 7
    TREE_RANDOM_STATE: int = 0

    # === CHAINED EQUATIONS (mice) ===
    MICE_IMPUTATIONS: int = 5
    MICE_MAX_ITER: int = 5
    MICE_N_ESTIMATORS: int = 10
    SEED_MAX: int = 100000

    # === OUTLIERS ===
    OUTLIER_COEF: float = 1.5
    CAPPING_LOWER: float = 0.05
    CAPPING_UPPER: float = 0.95

    LOG_LEVEL: str = "WARNING"

    @field_validator(
        "KNN_NEIGHBORS",
        "TREE_MIN_SAMPLES_SPLIT",
        "TREE_MIN_SAMPLES_LEAF",
        "MICE_IMPUTATIONS",
        "MICE_MAX_ITER",
        "MICE_N_ESTIMATORS",
        "SEED_MAX",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("OUTLIER_COEF")
    @classmethod
    def validate_coef(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("OUTLIER_COEF must be positive")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_capping_bounds(self) -> "Settings":
        if not 0 < self.CAPPING_LOWER < self.CAPPING_UPPER < 1:
            raise ValueError("capping percentiles must satisfy 0 < CAPPING_LOWER < CAPPING_UPPER < 1")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
