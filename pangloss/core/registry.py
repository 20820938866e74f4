"""
Explicit name -> factory registry with zero magic.

Entries are listed in a literal table at import time; there is no
auto-discovery and no scanning of loaded classes. Lookup is case-insensitive.

Two lookup styles:
- ``create(name)`` returns ``None`` for unknown names, leaving the decision to
  reject to the caller
- ``get(name)`` raises ConfigurationError, for paths where an unknown name is
  a hard error (config files)

Example:
    >>> registry = Registry('optimizer', {'sgd': SGDOptimizer})
    >>> registry.create('SGD')
    SGDOptimizer(...)
    >>> registry.create('nope') is None
    True
"""

import inspect
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _normalize(name: str) -> str:
    return name.strip().lower()


class Registry:
    """
    Registry of constructible variants for one component category.

    Design principles:
    - Explicit registration (literal table or decorator)
    - Case-insensitive keys, stored lower-cased
    - Fast lookup (O(1) dict access)
    - Clear errors (available names listed)

    Args:
        category: Component category, used in messages ('optimizer', ...)
        entries: Initial name -> factory mapping
    """

    def __init__(self, category: str, entries: Optional[Mapping[str, Callable[..., Any]]] = None):
        self.category = category
        self._entries: Dict[str, Callable[..., Any]] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}
        for name, factory in (entries or {}).items():
            self.add(name, factory)

    def add(self, name: str, factory: Callable[..., Any], override: bool = False) -> None:
        """
        Add a factory under ``name``.

        Raises:
            ValueError: If the name is empty, or already registered and
                ``override`` is False
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"{self.category} name must be a non-empty string")

        key = _normalize(name)
        if key in self._entries and not override:
            existing = self._entries[key]
            raise ValueError(
                f"{self.category.capitalize()} '{key}' already registered "
                f"({getattr(existing, '__module__', '?')}.{getattr(existing, '__name__', existing)}). "
                f"Use override=True to replace."
            )

        self._entries[key] = factory
        self._metadata[key] = {
            'module': getattr(factory, '__module__', None),
            'class': getattr(factory, '__name__', repr(factory)),
            'doc': inspect.getdoc(factory),
        }

    def register(self, name: str, override: bool = False) -> Callable:
        """
        Decorator form of :meth:`add`.

        Example:
            >>> @OPTIMIZER_REGISTRY.register('my_sgd')
            ... class MySGD(Optimizer):
            ...     ...
        """
        def decorator(factory: Callable[..., Any]) -> Callable[..., Any]:
            self.add(name, factory, override=override)
            return factory

        return decorator

    def has(self, name: str) -> bool:
        """Check if a name is registered (case-insensitive)."""
        return _normalize(name) in self._entries

    def get(self, name: str) -> Callable[..., Any]:
        """
        Get the factory registered under ``name``.

        Raises:
            ConfigurationError: If the name is not registered
        """
        key = _normalize(name)
        if key not in self._entries:
            available = ', '.join(self.names()) or '<none>'
            raise ConfigurationError(
                f"Unknown {self.category}: {name!r}. Available: {available}"
            )
        return self._entries[key]

    def create(self, name: str, **kwargs: Any) -> Optional[Any]:
        """
        Construct the variant registered under ``name``.

        Returns:
            New instance, or None if the name is not registered
        """
        key = _normalize(name)
        factory = self._entries.get(key)
        if factory is None:
            logger.debug(f"No {self.category} registered under {name!r}")
            return None
        return factory(**kwargs)

    def names(self) -> List[str]:
        """Registered names, sorted."""
        return sorted(self._entries)

    def metadata(self) -> Dict[str, Dict[str, Any]]:
        """Copy of per-entry metadata (module, class, doc)."""
        return {k: dict(v) for k, v in self._metadata.items()}

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Registry({self.category!r}, names={self.names()})"
