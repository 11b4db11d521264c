"""TaskLoop-AI.

An agent loop that turns a conversation into a sequence of classified actions
and keeps a running memory of what happened on each task thread.

High-level architecture
-----------------------

Every action the model chooses belongs to exactly one category:

- **NEW_TASK**: the model proposes a task and the human confirms it.
- **QUESTION**: the model needs information only the human has.
- **ACTION**: the model does work (file reads, listings, searches, writes).
- **COMPLETION**: the model presents results and asks whether the human is
  satisfied.

Core subpackages
----------------

- ``taskloop_ai.agent_core``:

  - The action catalog and classifier.
  - The pure transition function over per-thread session state.
  - A LangGraph-based orchestrator loop with explicit suspend/resume.
  - Session repositories (in-memory and async SQLAlchemy).

- ``taskloop_ai.core``:

  - Settings, logging configuration and optional Logfire monitoring.

Typical workflow
----------------

Most integrations should use ``taskloop_ai.agent_core.service.AgentService``:

1. Build the engine dependencies from ``Settings``.
2. Run the loop with the initial messages on a thread id.
3. Answer suspensions through a ``HumanChannel`` until the human is satisfied.
"""
