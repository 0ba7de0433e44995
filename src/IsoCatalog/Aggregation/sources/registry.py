# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.Aggregation.sources.registry",
#   "purpose": "Source generator registry with entry-point discovery.",
#   "sections": [
#     {
#       "id": "register-source",
#       "name": "register_source",
#       "anchor": "function-register-source",
#       "kind": "function"
#     },
#     {
#       "id": "get-registry",
#       "name": "get_registry",
#       "anchor": "function-get-registry",
#       "kind": "function"
#     },
#     {
#       "id": "load-source-plugins",
#       "name": "load_source_plugins",
#       "anchor": "function-load-source-plugins",
#       "kind": "function"
#     },
#     {
#       "id": "build-sources",
#       "name": "build_sources",
#       "anchor": "function-build-sources",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Source Generator Registry

Provides source registration and instantiation for catalog assembly:
- @register_source decorator keyed by the generator's ``name``
- Entry-point discovery (group ``isocatalog.sources``) for generators shipped
  in other distributions
- build_sources() to instantiate all, or a named subset, in registry order
"""

from __future__ import annotations

import logging
import threading
from importlib import metadata
from typing import Dict, Iterable, List, Optional, Type

from ..errors import SourceLookupError
from .base import SourceGenerator

__all__ = [
    "ENTRY_POINT_GROUP",
    "register_source",
    "unregister_source",
    "get_registry",
    "get_source_class",
    "load_source_plugins",
    "build_sources",
]

_LOGGER = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "isocatalog.sources"

_REGISTRY: Dict[str, Type[SourceGenerator]] = {}
_PLUGINS_LOCK = threading.Lock()
_PLUGINS_LOADED = False


def register_source(cls: Type[SourceGenerator]) -> Type[SourceGenerator]:
    """Class decorator registering a source generator under ``cls.name``."""
    name = getattr(cls, "name", "")
    if not name:
        raise ValueError(f"{cls.__name__} must define a non-empty 'name' to be registered")
    if name in _REGISTRY and _REGISTRY[name] is not cls:
        _LOGGER.warning("Overriding already-registered source: %s", name)
    _REGISTRY[name] = cls
    _LOGGER.debug("Registered source: %s → %s", name, cls.__name__)
    return cls


def unregister_source(name: str) -> None:
    """Remove ``name`` from the registry (no-op if absent)."""
    _REGISTRY.pop(name, None)


def get_registry() -> Dict[str, Type[SourceGenerator]]:
    """Get the source registry (copy)."""
    return dict(_REGISTRY)


def get_source_class(name: str) -> Type[SourceGenerator]:
    """Lookup a source generator class by name."""
    try:
        return _REGISTRY[name]
    except KeyError:
        available = sorted(_REGISTRY)
        raise SourceLookupError(f"Unknown source: {name!r}. Available: {available}") from None


def load_source_plugins(*, force: bool = False) -> List[str]:
    """Import and register generators advertised through entry points.

    Each entry point must resolve to a :class:`SourceGenerator` subclass.
    Broken plugins are logged and skipped.

    Returns:
        Names registered by this call.
    """
    global _PLUGINS_LOADED
    with _PLUGINS_LOCK:
        if _PLUGINS_LOADED and not force:
            return []
        loaded: List[str] = []
        for entry in metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            try:
                cls = entry.load()
            except Exception as exc:  # pragma: no cover - depends on installed plugins
                _LOGGER.warning("Failed to load source plugin %s: %s", entry.name, exc)
                continue
            if not (isinstance(cls, type) and issubclass(cls, SourceGenerator)):
                _LOGGER.warning(
                    "Ignoring source plugin %s: %r is not a SourceGenerator", entry.name, cls
                )
                continue
            register_source(cls)
            loaded.append(cls.name)
        _PLUGINS_LOADED = True
        if loaded:
            _LOGGER.info("Loaded %d source plugin(s): %s", len(loaded), loaded)
        return loaded


def build_sources(names: Optional[Iterable[str]] = None) -> List[SourceGenerator]:
    """Instantiate registered generators.

    Args:
        names: Subset to build, in the given order. ``None`` builds every
            registered generator sorted by name.

    Raises:
        SourceLookupError: If a requested name is not registered.
    """
    selected = sorted(_REGISTRY) if names is None else list(dict.fromkeys(names))
    sources = [get_source_class(name)() for name in selected]
    _LOGGER.info("Built %d sources: %s", len(sources), [s.name for s in sources])
    return sources
