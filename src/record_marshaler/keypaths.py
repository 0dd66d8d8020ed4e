"""Key path resolution against nested source documents."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Iterable, Tuple, Union

KeyPath = Union[str, Sequence[Union[str, int]]]


class _Missing:
    """Marker for a key path that resolved to nothing."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_key_path(key_path: KeyPath) -> Tuple[Union[str, int], ...]:
    """Return the segments of ``key_path``.

    Strings are split on dots; tuples and lists are taken as already split so
    that keys containing dots can still be addressed.
    """
    if isinstance(key_path, str):
        if not key_path:
            raise ValueError("Key path must not be empty")
        return tuple(key_path.split("."))
    segments = tuple(key_path)
    if not segments:
        raise ValueError("Key path must not be empty")
    return segments


def _step(container: Any, segment: Union[str, int]) -> Any:
    if isinstance(container, Mapping):
        if segment in container:
            return container[segment]
        # "0" in a dotted path may address an integer key and vice versa.
        if isinstance(segment, int) and str(segment) in container:
            return container[str(segment)]
        return MISSING

    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        if isinstance(segment, int):
            index = segment
        elif isinstance(segment, str) and segment.lstrip("-").isdigit():
            index = int(segment)
        else:
            return MISSING
        try:
            return container[index]
        except IndexError:
            return MISSING

    return MISSING


def resolve_key_path(document: Any, key_path: KeyPath) -> Any:
    """Return the value at ``key_path`` or ``MISSING``.

    A JSON ``null`` is a present value; only a path that cannot be walked to
    its end is absent.
    """
    current = document
    for segment in split_key_path(key_path):
        if current is None:
            return MISSING
        current = _step(current, segment)
        if current is MISSING:
            return MISSING
    return current


def first_present(key_paths: Iterable[KeyPath], document: Any) -> Any:
    """Return the value of the first key path that is present, else ``MISSING``."""
    for key_path in key_paths:
        value = resolve_key_path(document, key_path)
        if value is not MISSING:
            return value
    return MISSING


class Document:
    """Read-only view of a decoded source document."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        if isinstance(data, Document):
            data = data.data
        if not isinstance(data, Mapping):
            raise TypeError(f"Document root must be a mapping, got {type(data).__name__}")
        self._data = data

    @property
    def data(self) -> Mapping[str, Any]:
        return self._data

    def lookup(self, key_path: KeyPath) -> Any:
        return resolve_key_path(self._data, key_path)

    def first(self, key_paths: Iterable[KeyPath]) -> Any:
        return first_present(key_paths, self._data)

    def contains(self, key_path: KeyPath) -> bool:
        return self.lookup(key_path) is not MISSING

    def is_null(self, key_path: KeyPath) -> bool:
        return self.lookup(key_path) is None

    def __repr__(self) -> str:
        return f"Document({self._data!r})"
