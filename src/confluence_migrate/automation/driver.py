"""Page automation interface used by the wiki session."""

from abc import ABC, abstractmethod
from typing import Any, List, NamedTuple


class Locator(NamedTuple):
    """Element locator: strategy is one of 'id', 'css' or 'class'."""

    strategy: str
    value: str

    @classmethod
    def by_id(cls, value: str) -> 'Locator':
        return cls('id', value)

    @classmethod
    def by_css(cls, value: str) -> 'Locator':
        return cls('css', value)

    @classmethod
    def by_class(cls, value: str) -> 'Locator':
        return cls('class', value)

    def __str__(self) -> str:
        return f'{self.strategy}={self.value}'


class PageAutomation(ABC):
    """Synchronous, stateful browser-like automation channel.

    Implementations hold a single "current page / current frame" context,
    so one instance must never be shared by concurrent callers. Every
    method may raise AutomationError; find() raises ElementNotFoundError
    when nothing matches.
    """

    @abstractmethod
    def navigate(self, url: str) -> None:
        pass

    @abstractmethod
    def find(self, locator: Locator) -> Any:
        pass

    @abstractmethod
    def find_all(self, locator: Locator) -> List[Any]:
        pass

    @abstractmethod
    def click(self, element: Any) -> None:
        pass

    @abstractmethod
    def send_keys(self, element: Any, text: str) -> None:
        pass

    @abstractmethod
    def move_caret_to_start(self, element: Any) -> None:
        pass

    @abstractmethod
    def move_caret_to_end(self, element: Any) -> None:
        pass

    @abstractmethod
    def submit(self, element: Any) -> None:
        pass

    @abstractmethod
    def read_text(self, element: Any) -> str:
        pass

    @abstractmethod
    def switch_to_frame(self, frame_id: str) -> None:
        pass

    @abstractmethod
    def switch_to_parent(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass
