"""
Component registry for the evaluator.

Record readers register themselves here by name so the configuration
can pick the input format.
"""

from typing import Any, Callable, Dict, TypeVar

T = TypeVar("T")


class ComponentRegistry:
    """Name to factory mapping for one kind of pluggable component."""

    def __init__(self, kind: str = "component") -> None:
        self.kind = kind
        self._registry: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            if name in self._registry:
                raise ValueError(f"{self.kind.capitalize()} '{name}' already registered.")
            self._registry[name] = factory
            return factory

        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        available = self.available()
        if name not in available:
            known = ", ".join(sorted(available)) or "none"
            raise KeyError(f"Unknown {self.kind} '{name}' (registered: {known})")
        return available[name]

    def available(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._registry)


readers = ComponentRegistry("reader")
