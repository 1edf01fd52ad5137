"""Shared test fixtures: fake wiki session and fake page automation."""

from typing import Any, Callable, Dict, List, Optional

import pytest

from confluence_migrate.automation.driver import Locator, PageAutomation
from confluence_migrate.automation.exceptions import ElementNotFoundError
from confluence_migrate.config.config import PageConfig, WikiConfig


class FakeWikiSession:
    """In-memory stand-in for WikiSession.

    Pages live in ``tree`` as title -> parent title (None for the space
    root). Every call is recorded in ``calls``; ``failures`` maps a method
    name to an exception raised whenever that method is called.
    """

    def __init__(self, existing_pages: Optional[Dict[str, Optional[str]]] = None):
        self.tree: Dict[str, Optional[str]] = dict(existing_pages or {})
        self.pages = PageConfig()
        self.current: Optional[str] = None
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.bodies: Dict[str, str] = {}
        self.attachments: Dict[str, List[str]] = {}
        self.logged_in = False
        self.closed = False

    def _record(self, name: str, *args) -> None:
        self.calls.append((name,) + args)
        if name in self.failures:
            raise self.failures[name]

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def login(self) -> None:
        self._record('login')
        self.logged_in = True

    def page_exists(self, page_name: str) -> bool:
        self._record('page_exists', page_name)
        self.current = page_name
        return any(p.casefold() == page_name.casefold() for p in self.tree)

    def goto_space_root(self) -> None:
        self._record('goto_space_root')
        self.current = None

    def goto_page(self, page_name: str) -> None:
        self._record('goto_page', page_name)
        self.current = page_name

    def create_page(self, title: str, body: str = '') -> None:
        self._record('create_page', title, body)
        self.tree[title] = self.current
        self.bodies[title] = body
        self.current = title

    def attach_file(self, file_path: str) -> None:
        self._record('attach_file', file_path)
        self.attachments.setdefault(self.current, []).append(file_path)

    def import_word_document(self, file_path: str) -> None:
        self._record('import_word_document', file_path)

    def add_provenance_note(self) -> None:
        self._record('add_provenance_note')
        self.bodies[self.current] = (
            self.pages.provenance_note + self.bodies.get(self.current, '')
        )

    def insert_attachment_macro(self, macro) -> None:
        self._record('insert_attachment_macro', macro.name)

    def embed_first_attached_image(self) -> None:
        self._record('embed_first_attached_image')

    def close(self) -> None:
        self._record('close')
        self.closed = True


class FakeElement:
    """Element returned by FakeAutomation."""

    def __init__(self, locator: Locator, text: str = ''):
        self.locator = locator
        self.text = text
        self.keys: List[str] = []

    def __repr__(self) -> str:
        return f'FakeElement({self.locator})'


class FakeAutomation(PageAutomation):
    """Scriptable page automation.

    ``elements`` holds the elements currently present. ``on_click`` maps a
    locator to a callback run when its element is clicked; ``on_submit``
    does the same for submitted forms. ``absent_for`` maps a locator to the
    number of lookups that fail before it appears.
    """

    def __init__(self):
        self.elements: Dict[Locator, FakeElement] = {}
        self.lists: Dict[Locator, List[FakeElement]] = {}
        self.on_click: Dict[Locator, Callable[[], None]] = {}
        self.on_submit: Dict[Locator, Callable[[], None]] = {}
        self.absent_for: Dict[Locator, int] = {}
        self.actions: List[tuple] = []
        self.url: Optional[str] = None
        self.frames: List[str] = []
        self.closed = False

    def add(self, locator: Locator, text: str = '') -> FakeElement:
        element = FakeElement(locator, text)
        self.elements[locator] = element
        return element

    def remove(self, locator: Locator) -> None:
        self.elements.pop(locator, None)

    def navigate(self, url: str) -> None:
        self.actions.append(('navigate', url))
        self.url = url
        self.frames = []

    def find(self, locator: Locator) -> Any:
        self.actions.append(('find', locator))
        remaining = self.absent_for.get(locator, 0)
        if remaining > 0:
            self.absent_for[locator] = remaining - 1
            raise ElementNotFoundError(f'Element not found: {locator}', str(locator))
        try:
            return self.elements[locator]
        except KeyError:
            raise ElementNotFoundError(f'Element not found: {locator}', str(locator))

    def find_all(self, locator: Locator) -> List[Any]:
        self.actions.append(('find_all', locator))
        return list(self.lists.get(locator, []))

    def click(self, element: Any) -> None:
        self.actions.append(('click', element.locator))
        callback = self.on_click.get(element.locator)
        if callback is not None:
            callback()

    def send_keys(self, element: Any, text: str) -> None:
        self.actions.append(('send_keys', element.locator, text))
        element.keys.append(text)

    def move_caret_to_start(self, element: Any) -> None:
        self.actions.append(('caret_start', element.locator))

    def move_caret_to_end(self, element: Any) -> None:
        self.actions.append(('caret_end', element.locator))

    def submit(self, element: Any) -> None:
        self.actions.append(('submit', element.locator))
        callback = self.on_submit.get(element.locator)
        if callback is not None:
            callback()

    def read_text(self, element: Any) -> str:
        return element.text

    def switch_to_frame(self, frame_id: str) -> None:
        self.actions.append(('switch_to_frame', frame_id))
        if Locator.by_id(frame_id) not in self.elements:
            raise ElementNotFoundError(f'Frame {frame_id} not available', frame_id)
        self.frames.append(frame_id)

    def switch_to_parent(self) -> None:
        self.actions.append(('switch_to_parent',))
        if self.frames:
            self.frames.pop()

    def close(self) -> None:
        self.actions.append(('close',))
        self.closed = True

    def named(self, name: str) -> List[tuple]:
        return [a for a in self.actions if a[0] == name]


@pytest.fixture
def wiki_config() -> WikiConfig:
    return WikiConfig(
        base_url='https://wiki.example.com',
        space='DOCS',
        username='migrator',
        password='secret',
    )


@pytest.fixture
def fake_session() -> FakeWikiSession:
    return FakeWikiSession()


@pytest.fixture
def automation() -> FakeAutomation:
    return FakeAutomation()


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    return lambda seconds: None
