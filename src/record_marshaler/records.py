from __future__ import annotations

from typing import Any, Dict


class DynamicRecord:
    """Attribute bag used when no typed record class is available."""

    def __init__(self, entity: str, **values: Any) -> None:
        self.__dict__["entity"] = entity
        self.__dict__.update(values)

    def __getattr__(self, name: str) -> Any:
        # Only reached for fields that were never set.
        if name.startswith("__"):
            raise AttributeError(name)
        return None

    def as_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in self.__dict__.items() if key != "entity"}

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self.as_dict().items()
                           if not isinstance(value, (DynamicRecord, list)))
        return f"<{self.entity} {fields}>"
