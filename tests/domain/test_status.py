from __future__ import annotations

import logging

import pytest

from ledgersync.domain.status import (
    DEFAULT_STATUS_LABELS,
    NOT_STARTED,
    StatusTranslator,
    translate_status,
)


@pytest.mark.parametrize("label", DEFAULT_STATUS_LABELS)
def test_known_labels_map_to_themselves(label: str) -> None:
    assert translate_status(label) == label


def test_unknown_label_falls_back_and_warns(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        result = translate_status("Icebox")

    assert result == NOT_STARTED
    assert 'Unmapped board status "Icebox"' in caplog.text


@pytest.mark.parametrize("status", [None, ""])
def test_missing_status_uses_default_without_warning(
    caplog: pytest.LogCaptureFixture, status: str | None
) -> None:
    with caplog.at_level(logging.WARNING):
        result = translate_status(status)

    assert result == NOT_STARTED
    assert caplog.records == []


def test_custom_labels_and_default() -> None:
    translator = StatusTranslator.from_labels(["Todo", "Doing", ""], default="Inbox")

    assert translator.translate("Doing") == "Doing"
    assert translator.translate("Backlog") == "Inbox"
    assert "" not in translator.labels


def test_translation_is_case_sensitive() -> None:
    assert translate_status("backlog") == NOT_STARTED
