"""
In-memory stand-ins for the parts of the Playwright async API the page layer uses.

Elements are registered per selector key:
    page.locator(".card")            -> ".card"
    page.get_by_text("Login")        -> "text=Login"
    page.get_by_test_id("login")     -> "test_id=login"
    page.get_by_role("link", name=X) -> "role=link[name=X]"
    page.get_by_placeholder("Cari")  -> "placeholder=Cari"

Misses raise the real playwright TimeoutError / Error types so the code under
test sees the same exceptions it would from a browser.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


DEFAULT_BODY = " ".join(["mentor"] * 60)
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake"


class FakeElement:
    def __init__(
        self,
        text: Optional[str] = "",
        visible: bool = True,
        value: str = "",
        enabled: bool = True,
        hides: bool = True,
        fail_click: bool = False,
        mask: Optional[Callable[[str], str]] = None,
    ):
        self.text = text
        self.visible = visible
        self.value = value
        self.enabled = enabled
        self.hides = hides
        self.fail_click = fail_click
        self.mask = mask
        self.clicks = 0
        self.pressed: List[str] = []
        self.scrolled = False


class FakeLocator:
    def __init__(self, page: "FakePage", key: str, index: Optional[int] = None):
        self.page = page
        self.key = key
        self.index = index

    def __repr__(self) -> str:
        return f"FakeLocator({self.key!r}, index={self.index})"

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.key, 0)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.key, index)

    def _elements(self) -> List[FakeElement]:
        return self.page.elements.get(self.key, [])

    def _element(self) -> Optional[FakeElement]:
        elements = self._elements()
        index = self.index or 0
        return elements[index] if index < len(elements) else None

    def _require(self) -> FakeElement:
        element = self._element()
        if element is None:
            raise PlaywrightTimeoutError(f"Timeout exceeded waiting for locator('{self.key}')")
        return element

    async def wait_for(self, state: str = "visible", timeout: Optional[int] = None) -> None:
        self.page.record("wait_for", self.key, state, timeout)
        element = self._element()
        if state == "visible":
            if element is not None and element.visible:
                return
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for '{self.key}' to be visible")
        if state == "hidden":
            if element is None or not element.visible:
                return
            if element.hides:
                element.visible = False
                return
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for '{self.key}' to be hidden")
        raise PlaywrightError(f"Unsupported state: {state}")

    async def is_visible(self) -> bool:
        self.page.record("is_visible", self.key)
        element = self._element()
        return element is not None and element.visible

    async def count(self) -> int:
        self.page.record("count", self.key)
        if self.key in self.page.broken_selectors:
            raise PlaywrightError(f"Unexpected token in selector '{self.key}'")
        return len(self._elements())

    async def all_text_contents(self) -> List[str]:
        self.page.record("all_text_contents", self.key)
        return [element.text or "" for element in self._elements()]

    async def click(self, timeout: Optional[int] = None, **kwargs: Any) -> None:
        self.page.record("click", self.key, self.index, timeout)
        element = self._require()
        if element.fail_click:
            raise PlaywrightError("Element is not attached to the DOM")
        element.clicks += 1

    async def clear(self) -> None:
        self._require().value = ""

    async def fill(self, value: str, timeout: Optional[int] = None) -> None:
        self.page.record("fill", self.key, value, timeout)
        element = self._require()
        element.value = element.mask(value) if element.mask else value

    async def input_value(self) -> str:
        return self._require().value

    async def text_content(self) -> Optional[str]:
        return self._require().text

    async def press(self, key: str) -> None:
        self.page.record("press", self.key, key)
        self._require().pressed.append(key)

    async def scroll_into_view_if_needed(self) -> None:
        self._require().scrolled = True

    async def is_enabled(self) -> bool:
        return self._require().enabled


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.pressed: List[str] = []

    async def press(self, key: str) -> None:
        self.page.record("keyboard.press", key)
        self.page.fail_if("keyboard.press")
        self.pressed.append(key)


class FakeConsoleMessage:
    def __init__(self, type: str, text: str):
        self.type = type
        self.text = text


class FakePage:
    """
    Args:
        url: Current URL
        title: Document title
        body: Rendered body text
        elements: Selector key -> matched elements (in DOM order)
        evaluate_results: Substring of a JS expression -> value returned by evaluate()

    `errors` maps "keyboard.press", "evaluate" or "set_viewport_size" to the
    exception that call should raise.
    """

    def __init__(
        self,
        url: str = "about:blank",
        title: str = "",
        body: Optional[str] = DEFAULT_BODY,
        elements: Optional[Dict[str, List[FakeElement]]] = None,
        evaluate_results: Optional[Dict[str, Any]] = None,
    ):
        self.url = url
        self.title_text = title
        self.body = body
        self.elements: Dict[str, List[FakeElement]] = dict(elements or {})
        self.evaluate_results: Dict[str, Any] = dict(evaluate_results or {})
        self.broken_selectors: set = set()
        self.goto_error: Optional[Exception] = None
        self.load_state_errors: Dict[str, Exception] = {}
        self.errors: Dict[str, Exception] = {}
        self.navigated_url: Optional[str] = None
        self.viewport: Optional[Dict[str, int]] = None
        self.calls: List[tuple] = []
        self.routes: List[tuple] = []
        self.keyboard = FakeKeyboard(self)
        self._handlers: Dict[str, List[Callable]] = {}

    def record(self, *call: Any) -> None:
        self.calls.append(call)

    def fail_if(self, operation: str) -> None:
        """Raise the error registered in `errors` for this operation, if any."""
        if operation in self.errors:
            raise self.errors[operation]

    def add(self, key: str, *elements: FakeElement) -> None:
        self.elements.setdefault(key, []).extend(elements)

    # Locators

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def get_by_text(self, text: str, exact: bool = False) -> FakeLocator:
        return FakeLocator(self, f"text={text}")

    def get_by_test_id(self, test_id: str) -> FakeLocator:
        return FakeLocator(self, f"test_id={test_id}")

    def get_by_role(self, role: str, name: Optional[str] = None) -> FakeLocator:
        key = f"role={role}[name={name}]" if name else f"role={role}"
        return FakeLocator(self, key)

    def get_by_placeholder(self, text: str) -> FakeLocator:
        return FakeLocator(self, f"placeholder={text}")

    # Navigation

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.record("goto", url, wait_until, timeout)
        if self.goto_error is not None:
            raise self.goto_error
        self.navigated_url = url
        self.url = url

    async def reload(self, wait_until: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.record("reload", wait_until, timeout)

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        self.record("wait_for_load_state", state, timeout)
        if state in self.load_state_errors:
            raise self.load_state_errors[state]

    # Page state

    async def title(self) -> str:
        self.record("title")
        return self.title_text

    async def text_content(self, selector: str, timeout: Optional[int] = None) -> Optional[str]:
        self.record("text_content", selector)
        if selector == "body":
            return self.body
        elements = self.elements.get(selector, [])
        return elements[0].text if elements else None

    async def evaluate(self, expression: str, *args: Any) -> Any:
        self.record("evaluate", expression)
        self.fail_if("evaluate")
        for fragment, value in self.evaluate_results.items():
            if fragment in expression:
                return value
        return None

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        self.record("screenshot", path, full_page)
        if path:
            Path(path).write_bytes(FAKE_PNG)
        return FAKE_PNG

    async def set_viewport_size(self, size: Dict[str, int]) -> None:
        self.record("set_viewport_size", size)
        self.fail_if("set_viewport_size")
        self.viewport = dict(size)

    # Events and routing

    def on(self, event: str, handler: Callable) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def emit_console(self, type: str, text: str) -> None:
        for handler in self._handlers.get("console", []):
            handler(FakeConsoleMessage(type, text))

    async def route(self, pattern: str, handler: Callable) -> None:
        self.routes.append((pattern, handler))

    async def unroute(self, pattern: str) -> None:
        self.routes = [route for route in self.routes if route[0] != pattern]

    def is_closed(self) -> bool:
        return False


class FakeClock:
    """Monotonic clock advanced only by FakeSleep."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeSleep:
    """Records requested sleeps (seconds) and advances the paired clock."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.now += seconds

    @property
    def total(self) -> float:
        return sum(self.calls)
