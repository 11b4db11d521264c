from __future__ import annotations

"""Convenience factories for wiring the agent core.

This module contains small helpers to build the default capability registry,
the session store and the reasoning engine from ``Settings``, and to
instantiate an ``AgentEngine`` or ``AgentService``.

The intent is to keep application wiring and tests concise, while still
allowing advanced deployments to provide their own registry, store and
dependency bundles.
"""

import logging
from pathlib import Path
from typing import Optional

from ..core.config import ActionConfig, Settings
from .capabilities.builtin import (
    AskForClarificationCapability,
    AttemptCompletionCapability,
    ConfirmActionCapability,
    NewTaskCapability,
)
from .capabilities.file_ops import (
    ListFilesCapability,
    ReadFileCapability,
    SearchFilesCapability,
    WriteToFileCapability,
)
from .capabilities.registry import CapabilityRegistry
from .catalog import DEFAULT_CATALOG, ActionCatalog
from .reasoning import PydanticAIReasoningEngine, ReasoningEngine
from .repos import InMemorySessionRepository, SessionRepository
from .runtime import EngineDeps, HumanChannel
from .runtime.engine import AgentEngine
from .service import AgentService, AgentServiceDeps

logger = logging.getLogger(__name__)


def build_default_registry(config: Optional[ActionConfig] = None) -> CapabilityRegistry:
    """Build the default ``CapabilityRegistry``.

    The default registry has one implementation per action in
    ``DEFAULT_CATALOG``. File-system actions work relative to
    ``config.workspace_root``.
    """
    cfg = config or ActionConfig()
    root = Path(cfg.workspace_root)
    reg = CapabilityRegistry()
    reg.register(NewTaskCapability())
    reg.register(AskForClarificationCapability())
    reg.register(ConfirmActionCapability())
    reg.register(AttemptCompletionCapability())
    reg.register(ReadFileCapability(root=root, max_chars=cfg.read_max_chars))
    reg.register(ListFilesCapability(root=root))
    reg.register(SearchFilesCapability(root=root, max_matches=cfg.search_max_matches))
    reg.register(WriteToFileCapability(root=root))
    return reg


def check_registry(registry: CapabilityRegistry, catalog: ActionCatalog = DEFAULT_CATALOG) -> None:
    """Raise ``ValueError`` if a catalog action has no implementation."""
    missing = sorted(name for name in catalog.names() if not registry.has(name))
    if missing:
        raise ValueError(f"no capability registered for: {', '.join(missing)}")


async def build_session_repository(settings: Settings) -> SessionRepository:
    """Build the session store selected by ``settings.session_db_url``.

    Without a URL sessions live in memory. With one, the SQL tables are
    created if needed.
    """
    if not settings.session_db_url:
        return InMemorySessionRepository()

    from .repos.sql import SqlSessionRepository, create_all, create_engine, create_sessionmaker

    engine = create_engine(settings.session_db_url)
    await create_all(engine)
    logger.info("using SQL session store")
    return SqlSessionRepository(create_sessionmaker(engine))


def build_reasoning_engine(settings: Settings, catalog: ActionCatalog = DEFAULT_CATALOG) -> ReasoningEngine:
    return PydanticAIReasoningEngine(model=settings.model, catalog=catalog)


def build_engine_deps(
    *,
    settings: Settings,
    sessions: SessionRepository,
    reasoning: Optional[ReasoningEngine] = None,
    capabilities: Optional[CapabilityRegistry] = None,
    catalog: ActionCatalog = DEFAULT_CATALOG,
) -> EngineDeps:
    registry = capabilities or build_default_registry(settings.actions)
    check_registry(registry, catalog)
    return EngineDeps(
        sessions=sessions,
        capabilities=registry,
        reasoning=reasoning or build_reasoning_engine(settings, catalog),
        catalog=catalog,
        strict_affirmative=settings.strict_affirmative,
    )


def build_engine(*, deps: EngineDeps) -> AgentEngine:
    """Construct an ``AgentEngine`` from its dependencies."""
    return AgentEngine(deps=deps)


def build_service(*, engine_deps: EngineDeps, channel: HumanChannel) -> AgentService:
    return AgentService(deps=AgentServiceDeps(engine_deps=engine_deps, channel=channel))
