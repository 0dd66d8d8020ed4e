from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from .transformers import TransformerRegistry

DEFAULT_DATE_FORMAT: Optional[str] = None
DEFAULT_STRICT = False
DEFAULT_LOG_LEVEL = "INFO"

# A strptime format string, or a callable turning a string into a datetime.
DateFormat = Union[str, Callable[[str], Any], None]


@dataclass(frozen=True)
class MarshalOptions:
    date_format: DateFormat = DEFAULT_DATE_FORMAT
    strict: bool = DEFAULT_STRICT
    transformers: TransformerRegistry = field(default_factory=TransformerRegistry)
