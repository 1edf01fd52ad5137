"""Page name normalization and conflict-aware name resolution."""

import re
import uuid
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from ..models.source_file import SourceFile
from ..utils.logging import get_logger

DEFAULT_REPLACEMENTS: Dict[str, str] = {'+': ' and ', '&': ' and '}
DEFAULT_STRIPPED_CHARACTERS = '()[]{}<>|\\/:;#^@'

_WHITESPACE = re.compile(r'\s+')

logger = get_logger('PageNaming')


def normalize_page_name(
    name: str,
    replacements: Optional[Mapping[str, str]] = None,
    stripped_characters: Optional[str] = None,
) -> str:
    """Turn a file or directory name into a page title.

    Replaces literal substrings, removes characters that are not allowed in
    titles and collapses whitespace. Normalizing a normalized name returns
    it unchanged, provided no replacement value reintroduces a replaced
    substring or a stripped character.

    Args:
        name: Raw file or directory name
        replacements: Literal substring replacements
        stripped_characters: Characters to remove

    Returns:
        Normalized page name
    """
    if replacements is None:
        replacements = DEFAULT_REPLACEMENTS
    if stripped_characters is None:
        stripped_characters = DEFAULT_STRIPPED_CHARACTERS

    result = name
    for old, new in replacements.items():
        result = result.replace(old, new)
    if stripped_characters:
        result = result.translate({ord(c): None for c in stripped_characters})
    result = _WHITESPACE.sub(' ', result).strip()

    if result != name:
        logger.info(f'Page name {name!r} normalized to {result!r}')

    return result


def directory_page_name(segment: str) -> str:
    """Page name of a directory with the default naming rules."""
    resolver = PageNameResolver(Path('.'), page_exists=lambda name: False)
    return resolver.directory_page_name(segment)


def page_names_equal(left: str, right: str) -> bool:
    """Compare two page names the way the wiki compares titles."""
    return left.casefold() == right.casefold()


class PageNameResolver:
    """Resolves the target page name of a source file."""

    def __init__(
        self,
        root: Path,
        page_exists: Callable[[str], bool],
        replacements: Optional[Mapping[str, str]] = None,
        stripped_characters: Optional[str] = None,
        conflict_prefix: str = 'Conflict page',
        token_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        """Initialize resolver.

        Args:
            root: Import root
            page_exists: Existence check against the wiki
            replacements: Literal substring replacements
            stripped_characters: Characters removed from names
            conflict_prefix: Prefix of generated conflict names
            token_factory: Generator of unique conflict suffixes
        """
        self.root = Path(root)
        self.page_exists = page_exists
        self.replacements = replacements
        self.stripped_characters = stripped_characters
        self.conflict_prefix = conflict_prefix
        self.token_factory = token_factory
        self.logger = logger

    def normalize(self, name: str) -> str:
        return normalize_page_name(
            name,
            replacements=self.replacements,
            stripped_characters=self.stripped_characters,
        )

    def directory_page_name(self, segment: str) -> str:
        """Page name of a directory; never empty.

        A directory whose name normalizes to nothing is named after the
        conflict prefix. The name depends only on the segment, so the same
        directory maps to the same page on every run.
        """
        page_name = self.normalize(segment)
        if page_name:
            return page_name

        page_name = self.normalize(f'{self.conflict_prefix} {segment}') or 'Untitled'
        self.logger.info(f'Directory {segment!r} has no usable name, using {page_name}')
        return page_name

    def offline(self) -> 'PageNameResolver':
        """Copy of this resolver that never asks the wiki whether a page exists."""
        return PageNameResolver(
            self.root,
            page_exists=lambda name: False,
            replacements=self.replacements,
            stripped_characters=self.stripped_characters,
            conflict_prefix=self.conflict_prefix,
            token_factory=self.token_factory,
        )

    def resolve(self, source_file: SourceFile) -> str:
        """Pick the page name for a file.

        The base name is the normalized file stem. It is replaced by a
        conflict name when it matches a directory on the file's own path or
        a page that already exists.
        """
        page_name = self.normalize(source_file.stem)

        ancestors = [
            self.directory_page_name(d) for d in source_file.directory_parts(self.root)
        ]
        collides = not page_name or any(
            page_names_equal(page_name, d) for d in ancestors
        )
        if not collides:
            collides = self.page_exists(page_name)

        if not collides:
            return page_name

        conflict_name = self.normalize(
            f'{self.conflict_prefix} {source_file.name} {self.token_factory()}'
        )
        self.logger.info(
            f'Page for {source_file.name} already exists, create as {conflict_name}'
        )
        return conflict_name
