from __future__ import annotations

import logging

import pytest

from ledgersync.common.logging import configure_logging, level_from_environment


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("ERROR", logging.ERROR),
        ("warn", logging.WARNING),
        ("WARNING", logging.WARNING),
        ("info", logging.INFO),
        ("DEBUG", logging.DEBUG),
        ("verbose", logging.INFO),
    ],
)
def test_level_from_environment(
    monkeypatch: pytest.MonkeyPatch, value: str, expected: int
) -> None:
    monkeypatch.setenv("LOG_LEVEL", value)

    assert level_from_environment() == expected


def test_level_defaults_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    assert level_from_environment(logging.WARNING) == logging.WARNING


def test_configure_logging_applies_explicit_level() -> None:
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    try:
        configure_logging(level=logging.DEBUG, force=True)
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)
