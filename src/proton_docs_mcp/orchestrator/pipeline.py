"""Operation pipeline: one run per tool invocation, one result per run."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

from ..browser.base import BrowserSession, FieldSpec, Surface
from ..browser.manager import SessionManager
from ..config import EditorConfig, TimeoutConfig
from ..errors import OrchestratorError, RemoteInteractionError
from ..models import NotificationEvent, NotificationLevel, ToolArguments
from ..notifications.base import Notifier, NullNotifier
from .actions import ActionExecutor, ActionKind, ActionStep, StepRecord
from .resolver import ContextResolver, SurfaceKind

LOGGER = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    IDLE = "idle"
    NAVIGATING = "navigating"
    RESOLVING = "resolving"
    ACTING = "acting"
    SETTLING = "settling"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class OperationResult:
    """Terminal outcome of a pipeline run: a payload or a tagged failure."""

    operation: str
    ok: bool
    payload: dict[str, Any] = field(default_factory=dict)
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    steps: list[StepRecord] = field(default_factory=list)
    states: list[PipelineState] = field(default_factory=list)

    @classmethod
    def success(
        cls,
        operation: str,
        payload: dict[str, Any],
        *,
        steps: Optional[list[StepRecord]] = None,
        states: Optional[list[PipelineState]] = None,
    ) -> "OperationResult":
        return cls(operation, True, payload, steps=steps or [], states=states or [])

    @classmethod
    def failure(
        cls,
        operation: str,
        code: str,
        message: str,
        *,
        steps: Optional[list[StepRecord]] = None,
        states: Optional[list[PipelineState]] = None,
    ) -> "OperationResult":
        return cls(
            operation,
            False,
            error_code=code,
            error_message=message,
            steps=steps or [],
            states=states or [],
        )

    def to_payload(self) -> dict[str, Any]:
        if self.ok:
            return self.payload
        return {
            "error": {
                "operation": self.operation,
                "code": self.error_code,
                "message": self.error_message,
            }
        }


OperationBody = Callable[["PipelineRun", Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class Operation:
    """A named tool: its argument model and the body composing its steps."""

    name: str
    summary: str
    description: str
    arguments: type[ToolArguments]
    body: OperationBody


class PipelineRun:
    """Step-by-step context handed to an operation body.

    Tracks the state machine and every executed step. The browser session is
    acquired on first use, so bodies that fail before touching the UI never
    launch a browser.
    """

    def __init__(
        self,
        operation: str,
        sessions: SessionManager,
        resolver: ContextResolver,
        executor: ActionExecutor,
        timeouts: TimeoutConfig,
        editor: EditorConfig,
    ) -> None:
        self.operation = operation
        self.timeouts = timeouts
        self.editor = editor
        self._sessions = sessions
        self._resolver = resolver
        self._executor = executor
        self._session: Optional[BrowserSession] = None
        self.state = PipelineState.IDLE
        self.states: list[PipelineState] = [PipelineState.IDLE]
        self.steps: list[StepRecord] = []

    @property
    def current_url(self) -> str:
        return self._session.url if self._session else ""

    def transition(self, state: PipelineState) -> None:
        if self.state in (PipelineState.DONE, PipelineState.FAILED):
            raise RuntimeError(f"Pipeline already finished in state {self.state.value}")
        if state is not self.state:
            LOGGER.debug("%s: %s -> %s", self.operation, self.state.value, state.value)
            self.states.append(state)
        self.state = state

    async def open(self, target: str, kind: SurfaceKind = SurfaceKind.EDITOR) -> Surface:
        """Navigate to ``target`` and resolve the surface of ``kind`` there."""

        session = await self._acquire()
        self.transition(PipelineState.NAVIGATING)
        await self._resolver.navigate(session, target)
        self.transition(PipelineState.RESOLVING)
        surface = await self._resolver.locate(session, kind)
        LOGGER.info("%s resolved %s surface via %s", self.operation, kind.value, surface.method.value)
        return surface

    async def editor_surface(self) -> Surface:
        """Resolve the editor on the current page without navigating."""

        session = await self._acquire()
        self.transition(PipelineState.RESOLVING)
        return await self._resolver.find_editor(session)

    async def act(self, surface: Surface, *steps: ActionStep) -> list[StepRecord]:
        records = []
        for step in steps:
            if step.kind is ActionKind.SETTLE:
                self.transition(PipelineState.SETTLING)
            else:
                self.transition(PipelineState.ACTING)
            record = await self._executor.execute(surface, step)
            self.steps.append(record)
            records.append(record)
        return records

    async def read_text(self, surface: Surface, locator: str) -> str:
        self._begin_extract(surface)
        return await surface.read_text(locator, self.timeouts.element)

    async def read_html(self, surface: Surface, locator: str) -> str:
        self._begin_extract(surface)
        return await surface.read_html(locator, self.timeouts.element)

    async def collect(
        self,
        surface: Surface,
        locator: str,
        fields: Mapping[str, FieldSpec],
        limit: Optional[int] = None,
    ) -> list[dict[str, str]]:
        self._begin_extract(surface)
        return await surface.collect(locator, fields, limit)

    def _begin_extract(self, surface: Surface) -> None:
        self.transition(PipelineState.EXTRACTING)
        surface.ensure_current()

    async def _acquire(self) -> BrowserSession:
        if self._session is None:
            self._session = await self._sessions.acquire()
        return self._session


class OperationPipeline:
    """Runs operations and converts every outcome into one OperationResult."""

    def __init__(
        self,
        sessions: SessionManager,
        resolver: ContextResolver,
        executor: ActionExecutor,
        *,
        timeouts: Optional[TimeoutConfig] = None,
        editor: Optional[EditorConfig] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._sessions = sessions
        self._resolver = resolver
        self._executor = executor
        self._timeouts = timeouts or TimeoutConfig()
        self._editor = editor or EditorConfig()
        self._notifier = notifier or NullNotifier()

    async def run(self, operation: Operation, arguments: ToolArguments) -> OperationResult:
        run = PipelineRun(
            operation.name,
            self._sessions,
            self._resolver,
            self._executor,
            self._timeouts,
            self._editor,
        )
        LOGGER.info("Running %s", operation.name)
        self._notifier.notify(
            NotificationEvent(type="operation_started", message=f"Starting {operation.name}")
        )
        try:
            payload = await operation.body(run, arguments)
        except OrchestratorError as exc:
            return self._fail(run, operation, exc.code, exc.message)
        except Exception as exc:
            LOGGER.exception("Unexpected error while running %s", operation.name)
            return self._fail(run, operation, RemoteInteractionError.code, str(exc) or repr(exc))
        run.transition(PipelineState.DONE)
        self._notifier.notify(
            NotificationEvent(
                type="operation_succeeded",
                message=f"Completed {operation.name}",
                level=NotificationLevel.SUCCESS,
            )
        )
        return OperationResult.success(
            operation.name, payload, steps=run.steps, states=run.states
        )

    def _fail(
        self,
        run: PipelineRun,
        operation: Operation,
        code: str,
        cause: str,
    ) -> OperationResult:
        run.transition(PipelineState.FAILED)
        message = f"Failed to {operation.summary}: {cause}"
        LOGGER.warning("%s (%s)", message, code)
        self._notifier.notify(
            NotificationEvent(
                type="operation_failed",
                message=message,
                level=NotificationLevel.ERROR,
                data={"operation": operation.name, "code": code},
            )
        )
        return OperationResult.failure(
            operation.name, code, message, steps=run.steps, states=run.states
        )
