import logging

import pytest
from pydantic import ValidationError

from edaimpute.config import Settings, get_settings, setup_logging


def test_defaults():
    settings = Settings()
    assert settings.KNN_NEIGHBORS == 10
    assert settings.MICE_IMPUTATIONS == 5
    assert settings.SEED_MAX == 100000
    assert settings.OUTLIER_COEF == 1.5
    assert (settings.CAPPING_LOWER, settings.CAPPING_UPPER) == (0.05, 0.95)


def test_environment_override(monkeypatch):
    monkeypatch.setenv("EDAIMPUTE_KNN_NEIGHBORS", "3")
    monkeypatch.setenv("EDAIMPUTE_LOG_LEVEL", "debug")

    settings = Settings()
    assert settings.KNN_NEIGHBORS == 3
    assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"KNN_NEIGHBORS": 0},
        {"MICE_IMPUTATIONS": -2},
        {"OUTLIER_COEF": 0},
        {"CAPPING_LOWER": 0.9, "CAPPING_UPPER": 0.1},
        {"CAPPING_UPPER": 1.0},
        {"LOG_LEVEL": "VERBOSE"},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_setup_logging(tmp_path):
    log_file = tmp_path / "logs" / "edaimpute.log"
    setup_logging("INFO", log_file=str(log_file))

    package_logger = logging.getLogger("edaimpute")
    assert package_logger.level == logging.INFO
    assert len(package_logger.handlers) == 2

    # A second call replaces the handlers instead of stacking them
    setup_logging("DEBUG")
    assert package_logger.level == logging.DEBUG
    assert len(package_logger.handlers) == 1

    assert log_file.exists()
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
