"""Parent page chain creation with a per-run cache."""

from pathlib import Path
from typing import Callable, Iterator, List, Optional, Set

from loguru import logger

from ..automation.session import WikiSession
from .naming import directory_page_name


class PageExistenceCache:
    """Source directories whose page chain is known to exist in this run."""

    def __init__(self):
        self._directories: Set[str] = set()

    def __contains__(self, directory: object) -> bool:
        return str(directory) in self._directories

    def __len__(self) -> int:
        return len(self._directories)

    def __iter__(self) -> Iterator[str]:
        return iter(self._directories)

    def add(self, directory: Path) -> None:
        self._directories.add(str(directory))


class ParentPageCreator:
    """Creates the page chain mirroring a file's directory ancestry."""

    def __init__(
        self,
        session: WikiSession,
        root: Path,
        cache: Optional[PageExistenceCache] = None,
        normalize: Callable[[str], str] = directory_page_name,
    ):
        """Initialize parent page creator.

        Args:
            session: Wiki session
            root: Import root; it maps to the space root page
            cache: Run-scoped cache of completed directories
            normalize: Page name of a single directory segment, never empty
        """
        self.session = session
        self.root = Path(root)
        self.cache = cache if cache is not None else PageExistenceCache()
        self.normalize = normalize
        self.logger = logger.bind(component='ParentPageCreator')

    def page_path(self, directory: Path) -> List[str]:
        """Page names from the space root down to the directory's page.

        Raises:
            ValueError: If the directory is not under the import root
        """
        relative = Path(directory).relative_to(self.root)
        return [self.normalize(part) for part in relative.parts]

    def ensure_parent_pages(self, directory: Path) -> None:
        """Make sure the directory's page chain exists and open its leaf.

        Every directory on the way down is cached once its page is known to
        exist. Leaves the session on the leaf page, or on the space root for
        the import root itself.
        """
        directory = Path(directory)
        page_path = self.page_path(directory)

        if directory in self.cache:
            self._goto_leaf(page_path)
            return

        parts = directory.relative_to(self.root).parts
        parent: Optional[str] = None
        for depth, page_name in enumerate(page_path):
            prefix = self.root.joinpath(*parts[: depth + 1])
            if prefix not in self.cache and not self.session.page_exists(page_name):
                if parent is None:
                    self.session.goto_space_root()
                else:
                    self.session.goto_page(parent)
                self.session.create_page(page_name, '')
                self.logger.info(
                    f'Created page {page_name!r} under {parent or "space root"}'
                )
            self.cache.add(prefix)
            parent = page_name

        self.cache.add(directory)
        self._goto_leaf(page_path)

    def _goto_leaf(self, page_path: List[str]) -> None:
        if page_path:
            self.session.goto_page(page_path[-1])
        else:
            self.session.goto_space_root()
