"""LangGraph-based orchestrator loop.

 The runtime repeatedly asks the reasoning engine for one action, classifies
 it against the action catalog, performs it and folds the outcome into the
 thread's ``SessionState`` through the pure ``transition`` function:

 - ACTION-category actions execute immediately.
 - NEW_TASK, QUESTION and COMPLETION actions suspend the thread until a human
   reply is delivered through ``AgentEngine.resume``.

 The main entry point is ``AgentEngine``. Its collaborators are bundled in
 ``EngineDeps``.
 """

from .engine import AgentEngine
from .models import EngineDeps
from .suspension import ConsoleChannel, HumanChannel
from .transition import build_directive, transition

__all__ = [
    "AgentEngine",
    "EngineDeps",
    "ConsoleChannel",
    "HumanChannel",
    "build_directive",
    "transition",
]
