from __future__ import annotations

import importlib
import logging

import pytest

from gym_attendance.config import get_settings_module
from gym_attendance.logging_setup import configure_logging


@pytest.mark.parametrize(
    "env,expected",
    [
        ("prod", "gym_attendance.config.production"),
        ("production", "gym_attendance.config.production"),
        ("TEST", "gym_attendance.config.testing"),
        ("dev", "gym_attendance.config.development"),
        ("anything", "gym_attendance.config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == expected


def test_settings_modules_import():
    for name in ("development", "testing", "production"):
        settings = importlib.import_module(f"gym_attendance.config.{name}")
        assert set(settings.DB_CONFIG) == {"host", "port", "user", "password", "database"}


def test_configure_logging_is_idempotent():
    configure_logging("DEBUG")
    logger = configure_logging("WARNING")

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
