"""Capability implementations behind the catalog actions.

 - ``Capability``: ACTION-category work executed immediately (file read,
   list, search, write).
 - ``SuspendingCapability``: NEW_TASK / QUESTION / COMPLETION actions that
   describe a prompt for the human and turn the reply into a result.
 - ``CapabilityRegistry``: action name → implementation mapping.
 - ``CapabilityContext``/``CapabilityResult``: execution input/output models.
 """

from .base import (
    AnyCapability,
    Capability,
    CapabilityContext,
    CapabilityResult,
    SuspendingCapability,
)
from .registry import CapabilityRegistry

__all__ = [
    "AnyCapability",
    "Capability",
    "CapabilityContext",
    "CapabilityResult",
    "SuspendingCapability",
    "CapabilityRegistry",
]
