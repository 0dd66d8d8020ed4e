"""Named value transforms for transformable attributes."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Mapping, Optional

Transformer = Callable[[Any], Any]


class TransformerRegistry:
    """Lookup table of pure functions keyed by transformer name."""

    def __init__(self, transformers: Optional[Mapping[str, Transformer]] = None) -> None:
        self._transformers: Dict[str, Transformer] = {}
        for name, func in (transformers or {}).items():
            self.register(name, func)

    def register(self, name: str, func: Transformer) -> Transformer:
        if not name:
            raise ValueError("Transformer name must not be empty")
        if not callable(func):
            raise TypeError(f"Transformer {name!r} is not callable")
        self._transformers[name] = func
        return func

    def transformer(self, name: str) -> Callable[[Transformer], Transformer]:
        """Decorator form of :meth:`register`."""

        def decorator(func: Transformer) -> Transformer:
            return self.register(name, func)

        return decorator

    def get(self, name: str) -> Optional[Transformer]:
        return self._transformers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._transformers

    def __iter__(self) -> Iterator[str]:
        return iter(self._transformers)

    def __len__(self) -> int:
        return len(self._transformers)
