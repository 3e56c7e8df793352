"""Action steps and the executor that applies them to a surface."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from ..browser.base import Surface
from ..errors import ElementNotFoundError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyChord:
    """Modifier keys held around one terminal key, e.g. ``Control+Shift+x``."""

    keys: tuple[str, ...]

    @classmethod
    def parse(cls, spec: str) -> "KeyChord":
        keys = tuple(part for part in spec.split("+") if part)
        if not keys:
            raise ValueError(f"Empty key chord: {spec!r}")
        return cls(keys)

    @property
    def modifiers(self) -> tuple[str, ...]:
        return self.keys[:-1]

    @property
    def terminal(self) -> str:
        return self.keys[-1]

    def __str__(self) -> str:
        return "+".join(self.keys)


SELECT_ALL = KeyChord.parse("Control+a")
MOVE_TO_END = KeyChord.parse("Control+End")
FIND = KeyChord.parse("Control+f")
LINK = KeyChord.parse("Control+k")
ENTER = KeyChord.parse("Enter")
ESCAPE = KeyChord.parse("Escape")
SELECT_CHAR_LEFT = KeyChord.parse("Shift+ArrowLeft")


class ActionKind(str, enum.Enum):
    CLICK = "click"
    TYPE = "type"
    FILL = "fill"
    PRESS = "press"
    INSERT = "insert"
    WAIT_FOR = "wait_for"
    SETTLE = "settle"


class StepOutcome(str, enum.Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    SKIPPED = "skipped"
    SETTLED = "settled"


@dataclass(frozen=True)
class ActionStep:
    """One locator-or-fallback interaction attempt.

    Locator-driven kinds (click, type, fill, wait_for) try ``locator`` first and
    press ``fallback`` only when the locator does not appear within ``timeout``.
    ``press`` and ``insert`` act on whatever has focus. A step with
    ``required=False`` is skipped when neither path is available.
    ``timeout=None`` uses the executor's default budget.
    """

    kind: ActionKind
    locator: Optional[str] = None
    text: Optional[str] = None
    chord: Optional[KeyChord] = None
    fallback: Optional[KeyChord] = None
    timeout: Optional[float] = None
    click_count: int = 1
    repeat: int = 1
    required: bool = True
    seconds: float = 0.0
    label: Optional[str] = None

    @classmethod
    def click(
        cls,
        locator: str,
        *,
        fallback: Optional[KeyChord] = None,
        timeout: Optional[float] = None,
        required: bool = True,
        label: Optional[str] = None,
    ) -> "ActionStep":
        return cls(
            ActionKind.CLICK,
            locator=locator,
            fallback=fallback,
            timeout=timeout,
            required=required,
            label=label,
        )

    @classmethod
    def type_text(cls, locator: str, text: str, *, timeout: Optional[float] = None) -> "ActionStep":
        return cls(ActionKind.TYPE, locator=locator, text=text, timeout=timeout)

    @classmethod
    def fill(cls, locator: str, text: str, *, timeout: Optional[float] = None) -> "ActionStep":
        return cls(ActionKind.FILL, locator=locator, text=text, timeout=timeout, click_count=3)

    @classmethod
    def press(cls, chord: KeyChord, *, repeat: int = 1) -> "ActionStep":
        return cls(ActionKind.PRESS, chord=chord, repeat=repeat)

    @classmethod
    def insert(cls, text: str) -> "ActionStep":
        return cls(ActionKind.INSERT, text=text)

    @classmethod
    def wait_for(
        cls,
        locator: str,
        *,
        timeout: Optional[float] = None,
        required: bool = True,
    ) -> "ActionStep":
        return cls(ActionKind.WAIT_FOR, locator=locator, timeout=timeout, required=required)

    @classmethod
    def settle(cls, seconds: float, label: Optional[str] = None) -> "ActionStep":
        return cls(ActionKind.SETTLE, seconds=seconds, label=label)

    def describe(self) -> str:
        if self.label:
            return self.label
        target = self.locator or (str(self.chord) if self.chord else None)
        return f"{self.kind.value} {target}" if target else self.kind.value


@dataclass(frozen=True)
class StepRecord:
    """What happened when a step executed."""

    step: ActionStep
    outcome: StepOutcome

    @property
    def used_fallback(self) -> bool:
        return self.outcome is StepOutcome.FALLBACK


class ActionExecutor:
    """Runs single action steps with the primary-locator / fallback-chord strategy."""

    def __init__(self, default_timeout: float = 5.0, typing_delay: float = 0.0) -> None:
        self._default_timeout = default_timeout
        self._typing_delay = typing_delay

    async def execute(self, surface: Surface, step: ActionStep) -> StepRecord:
        surface.ensure_current()
        if step.kind is ActionKind.SETTLE:
            LOGGER.debug("Settling for %.2fs (%s)", step.seconds, step.describe())
            await surface.settle(step.seconds)
            return self._record(step, StepOutcome.SETTLED)
        if step.kind is ActionKind.PRESS:
            if step.chord is None:
                raise ValueError("Press step requires a chord")
            for _ in range(step.repeat):
                await self.press_chord(surface, step.chord)
            return self._record(step, StepOutcome.PRIMARY)
        if step.kind is ActionKind.INSERT:
            await surface.insert_text(step.text or "", delay=self._typing_delay)
            return self._record(step, StepOutcome.PRIMARY)
        if not step.locator:
            raise ValueError(f"{step.kind.value} step requires a locator")

        timeout = self._default_timeout if step.timeout is None else step.timeout
        if await surface.wait_for(step.locator, timeout):
            await self._interact(surface, step, timeout)
            return self._record(step, StepOutcome.PRIMARY)
        if step.fallback is not None:
            LOGGER.info("%s not found; using shortcut %s", step.locator, step.fallback)
            await self.press_chord(surface, step.fallback)
            return self._record(step, StepOutcome.FALLBACK)
        if not step.required:
            return self._record(step, StepOutcome.SKIPPED)
        raise ElementNotFoundError(step.locator)

    async def press_chord(self, surface: Surface, chord: KeyChord) -> None:
        """Hold modifiers, press the terminal key, release modifiers in reverse order."""

        for key in chord.modifiers:
            await surface.key_down(key)
        await surface.press(chord.terminal)
        for key in reversed(chord.modifiers):
            await surface.key_up(key)

    async def _interact(self, surface: Surface, step: ActionStep, timeout: float) -> None:
        if step.kind is ActionKind.WAIT_FOR:
            return
        await surface.click(step.locator, click_count=step.click_count, timeout=timeout)
        if step.kind in (ActionKind.TYPE, ActionKind.FILL) and step.text:
            await surface.type_into(
                step.locator, step.text, delay=self._typing_delay, timeout=timeout
            )

    @staticmethod
    def _record(step: ActionStep, outcome: StepOutcome) -> StepRecord:
        LOGGER.debug("Step %s -> %s", step.describe(), outcome.value)
        return StepRecord(step=step, outcome=outcome)
