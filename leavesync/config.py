"""Environment-driven settings via pydantic-settings.

Every setting reads from a ``LEAVESYNC_``-prefixed environment variable or a
``.env`` file in the working directory.
"""

import re
from datetime import date, timedelta
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from leavesync.adapters import FlagAdapter, MeridiemAdapter
from leavesync.interval import Kind

_TRUE = re.compile(r"^(true|t|yes|y|1)$", re.IGNORECASE)
_FALSE = re.compile(r"^(false|f|no|n|0)$", re.IGNORECASE)
_ALIAS_SEPARATOR = re.compile(r"\s*[,;]\s*")


def to_bool(value: Any) -> bool:
    """Interpret a flag given on the command line or in the environment."""
    if isinstance(value, bool):
        return value
    text = str(value).strip()
    if _TRUE.match(text):
        return True
    if _FALSE.match(text):
        return False
    raise ValueError(f'Unable to convert value to boolean: "{value}"')


def parse_email_aliases(text: str) -> list[tuple[str, ...]]:
    """Split alias groups: one group per line, addresses separated by , or ;"""
    groups = []
    for line in text.strip().splitlines():
        members = tuple(m for m in _ALIAS_SEPARATOR.split(line.strip()) if m)
        if members:
            groups.append(members)
    return groups


class Settings(BaseSettings):
    """Synchronisation settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEAVESYNC_", env_file=".env", case_sensitive=False
    )

    dry_run: bool = True
    lookback_days: int = 90

    # Leave types on the HR system
    holiday_leave_type: str = ""
    other_leave_type: str = ""
    ignored_leave_reasons: str = ""

    # Event ids on the project tool
    holiday_event_id: str = ""
    sickness_event_id: str = ""
    other_leave_event_id: str = ""

    email_aliases: str = ""

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("dry_run", mode="before")
    @classmethod
    def parse_dry_run(cls, v: Any) -> bool:
        return to_bool(v)

    @field_validator("lookback_days")
    @classmethod
    def check_lookback(cls, v: int) -> int:
        if v < 0:
            raise ValueError("lookback_days must be zero or greater")
        return v

    @property
    def alias_groups(self) -> list[tuple[str, ...]]:
        return parse_email_aliases(self.email_aliases)

    def cutoff(self, today: date) -> date:
        """Earliest date still considered when synchronising."""
        return today - timedelta(days=self.lookback_days)

    def meridiem_adapter(self) -> MeridiemAdapter:
        kind_map = {
            self.holiday_leave_type: Kind.HOLIDAY,
            self.other_leave_type: Kind.OTHER_LEAVE,
        }
        return MeridiemAdapter(
            {k: v for k, v in kind_map.items() if k},
            ignored_reasons=(
                r.strip() for r in self.ignored_leave_reasons.split(",") if r.strip()
            ),
        )

    def sickness_adapter(self) -> MeridiemAdapter:
        return MeridiemAdapter(default_kind=Kind.SICKNESS)

    def flag_adapter(self) -> FlagAdapter:
        event_ids = {
            Kind.HOLIDAY: self.holiday_event_id,
            Kind.SICKNESS: self.sickness_event_id,
            Kind.OTHER_LEAVE: self.other_leave_event_id,
        }
        return FlagAdapter({k: v for k, v in event_ids.items() if v})


@lru_cache
def get_settings() -> Settings:
    return Settings()
