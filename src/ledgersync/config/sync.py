"""Reconciliation settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from ledgersync.common.retry import BackoffPolicy
from ledgersync.domain.reconciliation import AmbiguityPolicy, TitleMatchMode
from ledgersync.domain.reconciliation.reverse import (
    DEFAULT_EXCLUDED_STATUSES,
    DEFAULT_REVERSE_DELAY_SECONDS,
)
from ledgersync.domain.status import DEFAULT_STATUS_LABELS

from .env import env_flag, optional_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class SyncConfig:
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    reverse_delay_seconds: float = DEFAULT_REVERSE_DELAY_SECONDS
    reverse_excluded_statuses: tuple[str, ...] = DEFAULT_EXCLUDED_STATUSES
    title_match_mode: TitleMatchMode = TitleMatchMode.EXACT
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.MOST_RECENT
    require_matching_url: bool = False
    status_labels: tuple[str, ...] = DEFAULT_STATUS_LABELS


def _parse_choice[E: (TitleMatchMode, AmbiguityPolicy)](
    enum_type: type[E],
    name: str,
    default: E,
) -> E:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        return enum_type(raw.lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(
            f"Invalid {name}: {raw!r} (expected one of: {choices})",
            field=name,
        ) from exc


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        title_match_mode=_parse_choice(
            TitleMatchMode, "LEDGERSYNC_TITLE_MATCH", TitleMatchMode.EXACT
        ),
        ambiguity=_parse_choice(
            AmbiguityPolicy, "LEDGERSYNC_AMBIGUITY", AmbiguityPolicy.MOST_RECENT
        ),
        require_matching_url=env_flag("LEDGERSYNC_REQUIRE_MATCHING_URL"),
    )
