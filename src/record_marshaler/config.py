"""Configuration loading for the record marshaler."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .models import DEFAULT_LOG_LEVEL, DEFAULT_STRICT, MarshalOptions
from .transformers import TransformerRegistry

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


def _bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    return default


def _str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True)
class Settings:
    date_format: Optional[str]
    strict: bool
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            # Left unset, dates fall back to dateutil's format-sniffing parser.
            date_format=_str(os.getenv("MARSHAL_DATE_FORMAT")),
            strict=_bool(os.getenv("MARSHAL_STRICT"), DEFAULT_STRICT),
            log_level=(_str(os.getenv("LOG_LEVEL")) or DEFAULT_LOG_LEVEL).upper(),
        )

    def marshal_options(
        self,
        transformers: Optional[TransformerRegistry] = None,
        *,
        date_format: Optional[str] = None,
        strict: Optional[bool] = None,
    ) -> MarshalOptions:
        """Build options from these settings; explicit arguments take precedence."""
        return MarshalOptions(
            date_format=date_format or self.date_format,
            strict=self.strict if strict is None else strict,
            transformers=transformers or TransformerRegistry(),
        )
