from __future__ import annotations

"""Capability registry.

The registry maps a catalog action name to an executable capability
implementation. The runtime engine resolves the reasoning engine's chosen
action through it after the action has been classified.
"""

from typing import Dict, FrozenSet

from .base import AnyCapability


class CapabilityRegistry:
    """
    In-memory mapping of action names to implementations.

    Notes:
        - ``register`` overwrites any existing mapping for the action name.
        - ``get`` will raise ``KeyError`` if the action has no implementation.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: Dict[str, AnyCapability] = {}

    def register(self, cap: AnyCapability) -> None:
        """
        Register a capability implementation.

        Args:
            cap: The capability instance to register. It must expose a ``name`` attribute.
        """
        self._caps[str(cap.name)] = cap

    def get(self, name: str) -> AnyCapability:
        """
        Retrieve a registered capability by action name.

        Raises:
            KeyError: If no capability is registered with the given name.
        """
        return self._caps[name]

    def has(self, name: str) -> bool:
        return name in self._caps

    def names(self) -> FrozenSet[str]:
        return frozenset(self._caps)
