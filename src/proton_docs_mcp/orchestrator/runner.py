"""Orchestrator facade that ties sessions, resolution and operations together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..browser.manager import SessionManager
from ..config import ServerConfig
from ..errors import UnknownToolError
from ..models import ToolArguments
from ..notifications.base import Notifier, NullNotifier
from .actions import ActionExecutor
from .operations import OPERATIONS
from .pipeline import Operation, OperationPipeline, OperationResult
from .resolver import ContextResolver

LOGGER = logging.getLogger(__name__)


class DocsOrchestrator:
    """Runs named document operations against one shared browser session."""

    def __init__(
        self,
        config: ServerConfig,
        sessions: SessionManager,
        notifier: Optional[Notifier] = None,
        operations: Optional[Mapping[str, Operation]] = None,
        resolver: Optional[ContextResolver] = None,
        executor: Optional[ActionExecutor] = None,
    ) -> None:
        self._config = config
        self._sessions = sessions
        self._notifier = notifier or NullNotifier()
        self._operations = dict(operations if operations is not None else OPERATIONS)
        self._resolver = resolver or ContextResolver(config.editor, config.timeouts)
        self._executor = executor or ActionExecutor(
            default_timeout=config.timeouts.element,
            typing_delay=config.timeouts.typing_delay,
        )
        self._pipeline = OperationPipeline(
            sessions,
            self._resolver,
            self._executor,
            timeouts=config.timeouts,
            editor=config.editor,
            notifier=self._notifier,
        )

    @property
    def operations(self) -> dict[str, Operation]:
        return dict(self._operations)

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    def get(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownToolError(f"Unknown tool: {name}") from None

    def parse_arguments(self, name: str, arguments: Mapping[str, Any] | None) -> ToolArguments:
        """Validate raw tool arguments; raises ``pydantic.ValidationError``."""

        return self.get(name).arguments.model_validate(dict(arguments or {}))

    async def run(
        self,
        name: str,
        arguments: Mapping[str, Any] | ToolArguments | None = None,
    ) -> OperationResult:
        operation = self.get(name)
        if not isinstance(arguments, ToolArguments):
            arguments = operation.arguments.model_validate(dict(arguments or {}))
        return await self._pipeline.run(operation, arguments)

    async def shutdown(self) -> None:
        LOGGER.info("Shutting down; releasing browser session")
        await self._sessions.release()
