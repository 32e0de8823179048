"""
================================================================================
Smart Locator with Ordered Fallback Strategies
================================================================================

Resilient element location for pages whose markup we do not control:
    - Ordered candidate lists per logical element ("search input", ...)
    - Short bounded probe per candidate, first visible match wins
    - Non-throwing probe (`resolve`) and throwing lookup (`locate`)
    - Fallback usage analytics for selector maintenance

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from .errors import ElementNotAvailableError


# Per-candidate probe. Kept short so a miss stays cheap when many
# candidates are tried in a row.
DEFAULT_PROBE_TIMEOUT = 2000


class StrategyKind(str, Enum):
    """How a candidate expression is turned into a Playwright locator."""

    CSS = "css"
    TEXT = "text"
    TEST_ID = "test_id"
    ROLE = "role"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class LocatorStrategy:
    """
    One way of locating an element.

    Attributes:
        kind: Strategy kind
        expression: Selector, text, test id, role or placeholder
        name: Accessible name (ROLE strategies only)
    """

    kind: StrategyKind
    expression: str
    name: Optional[str] = None

    def build(self, page: Page) -> Locator:
        """Build the (unbound) Playwright locator for this strategy."""
        if self.kind is StrategyKind.CSS:
            return page.locator(self.expression)
        if self.kind is StrategyKind.TEXT:
            return page.get_by_text(self.expression, exact=False)
        if self.kind is StrategyKind.TEST_ID:
            return page.get_by_test_id(self.expression)
        if self.kind is StrategyKind.ROLE:
            if self.name:
                return page.get_by_role(self.expression, name=self.name)
            return page.get_by_role(self.expression)
        if self.kind is StrategyKind.PLACEHOLDER:
            return page.get_by_placeholder(self.expression)
        raise ValueError(f"Unsupported strategy kind: {self.kind}")

    def describe(self) -> str:
        if self.kind is StrategyKind.ROLE and self.name:
            return f"role={self.expression}[name={self.name}]"
        return f"{self.kind.value}={self.expression}"


def css(selector: str) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.CSS, selector)


def text(value: str) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.TEXT, value)


def data_testid(value: str) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.TEST_ID, value)


def role(role_name: str, name: Optional[str] = None) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.ROLE, role_name, name)


def placeholder(value: str) -> LocatorStrategy:
    return LocatorStrategy(StrategyKind.PLACEHOLDER, value)


StrategyLike = Union[LocatorStrategy, str]


def _as_strategy(candidate: StrategyLike) -> LocatorStrategy:
    if isinstance(candidate, LocatorStrategy):
        return candidate
    return css(candidate)


@dataclass(frozen=True)
class CandidateList:
    """
    Ordered candidate strategies for one logical element.

    Order is priority: the first strategy is preferred, later ones are
    fallbacks. Plain strings are treated as CSS selectors.
    """

    element_name: str
    strategies: Tuple[LocatorStrategy, ...]

    @classmethod
    def of(cls, element_name: str, *candidates: StrategyLike) -> "CandidateList":
        return cls(element_name, tuple(_as_strategy(c) for c in candidates))

    @property
    def primary(self) -> Optional[LocatorStrategy]:
        return self.strategies[0] if self.strategies else None

    def __iter__(self):
        return iter(self.strategies)

    def __len__(self) -> int:
        return len(self.strategies)


Target = Union[str, CandidateList, Sequence[StrategyLike]]


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of one resolution.

    Attributes:
        found: Whether any candidate was visible
        strategy_used: The winning strategy (None when not found)
        elapsed: Seconds spent probing
        locator: Locator bound to the first match of the winning strategy
        attempts: Description of each failed attempt, in order
    """

    found: bool
    strategy_used: Optional[LocatorStrategy]
    elapsed: float
    locator: Optional[Locator] = None
    attempts: Tuple[str, ...] = ()


@dataclass
class LocatorHealth:
    """
    Tracks which candidate resolved an element.

    Attributes:
        element_name: Human-readable element name
        primary_strategy: The preferred strategy
        used_fallback: Whether a later candidate was used
        fallback_strategy: The fallback used (if any)
        fallback_position: Position of the fallback in the list (if any)
    """

    element_name: str
    primary_strategy: str
    used_fallback: bool = False
    fallback_strategy: Optional[str] = None
    fallback_position: Optional[int] = None


class SmartLocator:
    """
    Ordered-fallback element locator.

    Usage:
        >>> smart = SmartLocator(page, locators=MENTORING_LOCATORS)
        >>> probe = await smart.resolve("search_input")
        >>> if probe.found:
        ...     await probe.locator.fill("Engineer")
        >>> card = await smart.locate("mentor_cards")   # raises if absent

    Targets can be a registry key, a CandidateList, or an inline sequence
    of strategies / CSS selectors.
    """

    def __init__(
        self,
        page: Page,
        locators: Optional[Mapping[str, CandidateList]] = None,
        probe_timeout: int = DEFAULT_PROBE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            page: Playwright Page object
            locators: Registry of named candidate lists
            probe_timeout: Default per-candidate probe timeout (ms)
            clock: Monotonic clock used for elapsed time
        """
        self.page = page
        self.locators: Dict[str, CandidateList] = dict(locators or {})
        self.probe_timeout = probe_timeout
        self._clock = clock
        self._health_records: List[LocatorHealth] = []
        self._fallback_used: Dict[str, LocatorHealth] = {}

    def candidates(self, target: Target, element_name: Optional[str] = None) -> CandidateList:
        """Normalize a target into a CandidateList."""
        if isinstance(target, CandidateList):
            return target
        if isinstance(target, str):
            if target in self.locators:
                return self.locators[target]
            raise KeyError(f"No locators registered for element: {target}")
        return CandidateList.of(element_name or "custom_element", *target)

    async def resolve(
        self,
        target: Target,
        probe_timeout: Optional[int] = None,
        element_name: Optional[str] = None,
    ) -> ProbeResult:
        """
        Return the first candidate whose first match is visible.

        Candidates are probed left to right, each bounded by `probe_timeout`
        milliseconds. A miss on every candidate is reported as
        `found=False`; this method does not raise for absent elements.
        """
        candidate_list = self.candidates(target, element_name)
        timeout = self.probe_timeout if probe_timeout is None else probe_timeout
        started = self._clock()
        attempts: List[str] = []

        for position, strategy in enumerate(candidate_list.strategies):
            locator = strategy.build(self.page).first
            try:
                await locator.wait_for(state="visible", timeout=timeout)
            except PlaywrightError as e:
                attempts.append(f"{strategy.describe()} -> {str(e).splitlines()[0][:80]}")
                continue

            self._record(candidate_list, strategy, position)
            return ProbeResult(
                found=True,
                strategy_used=strategy,
                elapsed=self._clock() - started,
                locator=locator,
                attempts=tuple(attempts),
            )

        elapsed = self._clock() - started
        logger.debug(
            f"No visible match for '{candidate_list.element_name}' "
            f"after {len(attempts)} candidate(s) in {elapsed:.2f}s"
        )
        return ProbeResult(found=False, strategy_used=None, elapsed=elapsed, attempts=tuple(attempts))

    async def locate(
        self,
        target: Target,
        probe_timeout: Optional[int] = None,
        element_name: Optional[str] = None,
        budget: Optional[int] = None,
    ) -> Locator:
        """
        Locate a required element.

        With `budget` (ms), the candidate list is swept again with short
        probes for as many full sweeps as fit in the budget.

        Raises:
            ElementNotAvailableError: When no candidate is visible
        """
        candidate_list = self.candidates(target, element_name)
        timeout = self.probe_timeout if probe_timeout is None else probe_timeout
        sweep_cost = max(1, timeout * len(candidate_list.strategies))
        sweeps = 1 if budget is None else max(1, budget // sweep_cost)

        started = self._clock()
        for _ in range(sweeps):
            probe = await self.resolve(candidate_list, timeout)
            if probe.found:
                return probe.locator

        details = "\n".join(f"  - {attempt}" for attempt in probe.attempts)
        logger.error(f"❌ All locators failed for '{candidate_list.element_name}':\n{details}")
        raise ElementNotAvailableError(
            f"'{candidate_list.element_name}' not available on the page",
            target=candidate_list.element_name,
            elapsed=self._clock() - started,
            url=self.page.url,
        )

    async def is_visible(
        self,
        target: Target,
        timeout: Optional[int] = None,
        element_name: Optional[str] = None,
    ) -> bool:
        """Non-throwing visibility probe."""
        probe = await self.resolve(target, timeout, element_name)
        return probe.found

    def _record(self, candidate_list: CandidateList, strategy: LocatorStrategy, position: int) -> None:
        primary = candidate_list.primary.describe() if candidate_list.primary else strategy.describe()
        health = LocatorHealth(
            element_name=candidate_list.element_name,
            primary_strategy=primary,
            used_fallback=position > 0,
            fallback_strategy=strategy.describe() if position > 0 else None,
            fallback_position=position if position > 0 else None,
        )
        self._health_records.append(health)

        if position > 0:
            logger.warning(
                f"⚠️ Element '{candidate_list.element_name}' used fallback #{position}: "
                f"{strategy.describe()}"
            )
            self._fallback_used[candidate_list.element_name] = health
        else:
            logger.debug(f"✅ Element '{candidate_list.element_name}' found: {strategy.describe()}")

    @property
    def health_records(self) -> Tuple[LocatorHealth, ...]:
        return tuple(self._health_records)

    def get_health_report(self) -> str:
        """
        Generate locator health report.

        Lists elements that needed a fallback candidate; those primary
        selectors are candidates for maintenance.
        """
        if not self._fallback_used:
            return "✅ All elements used primary locators. No maintenance needed."

        report_lines = [
            "⚠️ Locator Health Report - Fallbacks Used:",
            "",
        ]
        for element_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{element_name}]",
                f"    Missed primary: {health.primary_strategy}",
                f"    Used #{health.fallback_position}: {health.fallback_strategy}",
                "",
            ])
        return "\n".join(report_lines)

    def register_locator(self, element_name: str, candidates: Iterable[StrategyLike]) -> CandidateList:
        """Register (or replace) a candidate list at runtime."""
        candidate_list = CandidateList.of(element_name, *candidates)
        self.locators[element_name] = candidate_list
        logger.debug(f"Registered locator: {element_name} ({len(candidate_list)} candidates)")
        return candidate_list


__all__ = [
    "DEFAULT_PROBE_TIMEOUT",
    "StrategyKind",
    "LocatorStrategy",
    "CandidateList",
    "ProbeResult",
    "LocatorHealth",
    "SmartLocator",
    "Target",
    "css",
    "text",
    "data_testid",
    "role",
    "placeholder",
]
