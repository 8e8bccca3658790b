"""
rwsteps/core/registry.py
========================
Plugin registry: lets callers register extra rule sets (or other
named components) without modifying core code.

Pattern: Registry.register("name", component, category="rule_set")
         Registry.get("name", category="rule_set") → component
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class Registry:
    """Named component registry, grouped by category.

    Usage:
        # Register an ordered rule set
        Registry.register("mine", (Rule.E, Rule.C), category="rule_set")

        # Retrieve it
        rules = Registry.get("mine", category="rule_set")
    """
    _store: Dict[str, Dict[str, Any]] = {}    # category → {name → component}

    @classmethod
    def register(
        cls,
        name:      str,
        component: Any,
        category:  str = "default",
        override:  bool = False,
    ) -> None:
        items = cls._store.setdefault(category, {})
        if name in items and not override:
            raise KeyError(
                f"Component '{name}' already registered in category '{category}'. "
                "Use override=True to replace."
            )
        items[name] = component
        logger.debug(f"Registered [{category}] '{name}'")

    @classmethod
    def get(cls, name: str, category: str = "default") -> Any:
        try:
            return cls._store[category][name]
        except KeyError:
            raise KeyError(
                f"Component '{name}' not found in category '{category}'. "
                f"Available: {cls.names(category)}"
            )

    @classmethod
    def names(cls, category: str = "default") -> List[str]:
        return list(cls._store.get(category, {}).keys())

    @classmethod
    def unregister(cls, name: str, category: str = "default") -> None:
        cls._store.get(category, {}).pop(name, None)

    @classmethod
    def list_all(cls, category: Optional[str] = None) -> Dict:
        if category:
            return dict(cls._store.get(category, {}))
        return {cat: list(items.keys()) for cat, items in cls._store.items()}
