"""
================================================================================
Readiness Detector
================================================================================

Decides when a page (or a dynamic region such as search results) is stable
enough to interact with. Readiness is a fixed pipeline of phases, each with
its own bounded wait:

    1. NAVIGATION     - DOM content loaded + network idle
    2. INDICATORS     - visible loading indicators become hidden
    3. CONTENT        - rendered body text reaches a minimum word count
    4. STABILIZATION  - a dynamic count stops changing (max two samples)

`evaluate()` returns a tagged ReadinessResult and stops at the first failing
phase. `await_ready()` is the blocking gate: it returns the result when all
requested phases pass, otherwise raises the error for the failing phase.

Usage:
    detector = ReadinessDetector(page, ReadinessOptions(min_words=50))
    await detector.await_ready()
    await detector.await_ready(SEARCH_RESULT_PHASES, count_fn=page_obj.count_mentor_cards)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .errors import ErrorKind, UIAutomationError, error_for_kind
from .locators import DEFAULT_LOADING_SELECTORS


CountFn = Callable[[], Awaitable[int]]
SleepFn = Callable[[float], Awaitable[None]]


class ReadinessPhase(str, Enum):
    NAVIGATION = "navigation"
    INDICATORS = "indicators"
    CONTENT = "content"
    STABILIZATION = "stabilization"


ALL_PHASES: Tuple[ReadinessPhase, ...] = tuple(ReadinessPhase)
NAVIGATION_PHASES: Tuple[ReadinessPhase, ...] = (
    ReadinessPhase.NAVIGATION,
    ReadinessPhase.INDICATORS,
)
PAGE_LOAD_PHASES: Tuple[ReadinessPhase, ...] = (
    ReadinessPhase.NAVIGATION,
    ReadinessPhase.INDICATORS,
    ReadinessPhase.CONTENT,
)
SEARCH_RESULT_PHASES: Tuple[ReadinessPhase, ...] = (
    ReadinessPhase.INDICATORS,
    ReadinessPhase.STABILIZATION,
)


@dataclass(frozen=True)
class ReadinessOptions:
    """
    Bounds for each readiness phase.

    Attributes:
        page_load_timeout: Navigation load-state timeout (ms)
        indicator_timeout: Max wait for one visible indicator to hide (ms)
        loading_selectors: Loading indicator selectors, checked in order
        min_words: Minimum body word count for the content phase
        settle_delay: Delay between stabilization samples (ms)
        load_states: Playwright load states awaited in the navigation phase
    """

    page_load_timeout: int = 30000
    indicator_timeout: int = 15000
    loading_selectors: Tuple[str, ...] = DEFAULT_LOADING_SELECTORS
    min_words: int = 50
    settle_delay: int = 2000
    load_states: Tuple[str, ...] = ("domcontentloaded", "networkidle")


@dataclass
class ReadinessSignals:
    navigation_settled: bool = False
    spinners_hidden: bool = False
    min_content_met: bool = False
    count_stable: bool = False

    @property
    def ready(self) -> bool:
        return (
            self.navigation_settled
            and self.spinners_hidden
            and self.min_content_met
            and self.count_stable
        )


@dataclass(frozen=True)
class PhaseOutcome:
    """Tagged result of one phase: ok, or the failure kind with details."""

    phase: ReadinessPhase
    ok: bool
    elapsed: float
    detail: str = ""
    error_kind: Optional[ErrorKind] = None
    cause: Optional[BaseException] = None


@dataclass
class ReadinessResult:
    signals: ReadinessSignals = field(default_factory=ReadinessSignals)
    outcomes: List[PhaseOutcome] = field(default_factory=list)
    word_count: Optional[int] = None
    stable_count: Optional[int] = None
    samples: Tuple[int, ...] = ()
    url: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.signals.ready

    @property
    def failure(self) -> Optional[PhaseOutcome]:
        for outcome in self.outcomes:
            if not outcome.ok:
                return outcome
        return None

    @property
    def elapsed(self) -> float:
        return sum(outcome.elapsed for outcome in self.outcomes)

    def raise_for_failure(self) -> None:
        """Raise the error registered for the failing phase's kind, if any."""
        failure = self.failure
        if failure is None:
            return
        error_cls = error_for_kind(failure.error_kind)
        error: UIAutomationError = error_cls(
            f"Readiness phase '{failure.phase.value}' failed: {failure.detail}",
            target=failure.phase.value,
            elapsed=self.elapsed,
            url=self.url,
        )
        if failure.cause is not None:
            raise error from failure.cause
        raise error


class ReadinessDetector:
    """
    Runs the readiness pipeline against a Playwright page.

    `sleep` and `clock` are injectable so the bounded-wait behaviour can be
    exercised without a browser or real delays.
    """

    def __init__(
        self,
        page: Page,
        options: Optional[ReadinessOptions] = None,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.page = page
        self.options = options or ReadinessOptions()
        self._sleep = sleep
        self._clock = clock

    async def evaluate(
        self,
        phases: Sequence[ReadinessPhase] = ALL_PHASES,
        count_fn: Optional[CountFn] = None,
    ) -> ReadinessResult:
        """
        Run the requested phases in pipeline order.

        Phases that are not requested are reported as satisfied. Stops at the
        first failing phase; later phases keep their signal False.

        Args:
            phases: Phases to run (run in pipeline order regardless of input order)
            count_fn: Dynamic count sampler for the stabilization phase.
                Without it, stabilization is trivially satisfied.
        """
        requested = set(phases)
        result = ReadinessResult()

        for phase in ALL_PHASES:
            if phase not in requested:
                self._set_signal(result.signals, phase)
                continue

            started = self._clock()
            outcome = await self._run_phase(phase, result, count_fn, started)
            result.outcomes.append(outcome)
            if not outcome.ok:
                logger.warning(f"⏳ Readiness phase '{phase.value}' failed: {outcome.detail}")
                break
            self._set_signal(result.signals, phase)

        result.url = self.page.url
        return result

    async def await_ready(
        self,
        phases: Sequence[ReadinessPhase] = ALL_PHASES,
        count_fn: Optional[CountFn] = None,
    ) -> ReadinessResult:
        """Blocking gate: return when ready, else raise the failing phase's error."""
        result = await self.evaluate(phases, count_fn)
        result.raise_for_failure()
        return result

    async def _run_phase(
        self,
        phase: ReadinessPhase,
        result: ReadinessResult,
        count_fn: Optional[CountFn],
        started: float,
    ) -> PhaseOutcome:
        if phase is ReadinessPhase.NAVIGATION:
            return await self._await_navigation(started)
        if phase is ReadinessPhase.INDICATORS:
            return await self._drain_indicators(started)
        if phase is ReadinessPhase.CONTENT:
            return await self._check_content(result, started)
        return await self._stabilize(result, count_fn, started)

    async def _await_navigation(self, started: float) -> PhaseOutcome:
        for state in self.options.load_states:
            try:
                await self.page.wait_for_load_state(state, timeout=self.options.page_load_timeout)
            except PlaywrightError as e:
                return PhaseOutcome(
                    phase=ReadinessPhase.NAVIGATION,
                    ok=False,
                    elapsed=self._clock() - started,
                    detail=f"load state '{state}' not reached within {self.options.page_load_timeout}ms",
                    error_kind=ErrorKind.NAVIGATION_TIMEOUT,
                    cause=e,
                )
        return PhaseOutcome(ReadinessPhase.NAVIGATION, ok=True, elapsed=self._clock() - started)

    async def _drain_indicators(self, started: float) -> PhaseOutcome:
        drained = 0
        for selector in self.options.loading_selectors:
            indicator = self.page.locator(selector).first
            try:
                visible = await indicator.is_visible()
            except PlaywrightError:
                # Invalid or detached indicator selector counts as absent
                continue
            if not visible:
                continue

            logger.debug(f"⏳ Waiting for loading indicator: {selector}")
            try:
                await indicator.wait_for(state="hidden", timeout=self.options.indicator_timeout)
            except PlaywrightError as e:
                return PhaseOutcome(
                    phase=ReadinessPhase.INDICATORS,
                    ok=False,
                    elapsed=self._clock() - started,
                    detail=f"loading indicator '{selector}' still visible after {self.options.indicator_timeout}ms",
                    error_kind=ErrorKind.READINESS_TIMEOUT,
                    cause=e,
                )
            drained += 1

        return PhaseOutcome(
            ReadinessPhase.INDICATORS,
            ok=True,
            elapsed=self._clock() - started,
            detail=f"{drained} indicator(s) drained",
        )

    async def _check_content(self, result: ReadinessResult, started: float) -> PhaseOutcome:
        try:
            body_text = await self.page.text_content("body", timeout=self.options.page_load_timeout)
        except PlaywrightError as e:
            return PhaseOutcome(
                phase=ReadinessPhase.CONTENT,
                ok=False,
                elapsed=self._clock() - started,
                detail="page body could not be read",
                error_kind=ErrorKind.INSUFFICIENT_CONTENT,
                cause=e,
            )

        word_count = count_words(body_text)
        result.word_count = word_count
        if word_count < self.options.min_words:
            return PhaseOutcome(
                phase=ReadinessPhase.CONTENT,
                ok=False,
                elapsed=self._clock() - started,
                detail=(
                    f"page appears to be empty or not fully loaded: "
                    f"{word_count} word(s), minimum {self.options.min_words}"
                ),
                error_kind=ErrorKind.INSUFFICIENT_CONTENT,
            )
        logger.debug(f"✅ Content check passed - {word_count} words loaded")
        return PhaseOutcome(
            ReadinessPhase.CONTENT,
            ok=True,
            elapsed=self._clock() - started,
            detail=f"{word_count} words",
        )

    async def _stabilize(
        self,
        result: ReadinessResult,
        count_fn: Optional[CountFn],
        started: float,
    ) -> PhaseOutcome:
        if count_fn is None:
            return PhaseOutcome(
                ReadinessPhase.STABILIZATION,
                ok=True,
                elapsed=self._clock() - started,
                detail="no dynamic count to stabilize",
            )

        delay = self.options.settle_delay / 1000
        before = await count_fn()
        await self._sleep(delay)
        after = await count_fn()
        result.samples = (before, after)

        if before == after:
            detail = f"count stable at {after}"
            logger.debug(f"✅ {detail}")
        else:
            # One more settle period, then accept the latest sample
            detail = f"count still changing ({before} -> {after}), accepted {after}"
            logger.info(f"⚠️ {detail}")
            await self._sleep(delay)

        result.stable_count = after
        return PhaseOutcome(
            ReadinessPhase.STABILIZATION,
            ok=True,
            elapsed=self._clock() - started,
            detail=detail,
        )

    @staticmethod
    def _set_signal(signals: ReadinessSignals, phase: ReadinessPhase) -> None:
        if phase is ReadinessPhase.NAVIGATION:
            signals.navigation_settled = True
        elif phase is ReadinessPhase.INDICATORS:
            signals.spinners_hidden = True
        elif phase is ReadinessPhase.CONTENT:
            signals.min_content_met = True
        else:
            signals.count_stable = True


def count_words(body_text: Optional[str]) -> int:
    """Whitespace-separated word count; None counts as zero."""
    if not body_text:
        return 0
    return len(body_text.split())


__all__ = [
    "ReadinessPhase",
    "ReadinessOptions",
    "ReadinessSignals",
    "PhaseOutcome",
    "ReadinessResult",
    "ReadinessDetector",
    "ALL_PHASES",
    "NAVIGATION_PHASES",
    "PAGE_LOAD_PHASES",
    "SEARCH_RESULT_PHASES",
    "count_words",
]
