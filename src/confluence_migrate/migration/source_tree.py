"""Import root enumeration and the migrated-file commit."""

import os
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..models.source_file import SourceFile, DEFAULT_MIGRATED_SUFFIX
from ..automation.exceptions import SourceRootMissingError

DEFAULT_ENCODING = 'utf-8'
DEFAULT_ENCODING_ERRORS = 'replace'


class SourceTree:
    """Files below the import root."""

    def __init__(
        self,
        root: str,
        migrated_suffix: str = DEFAULT_MIGRATED_SUFFIX,
        encoding: str = DEFAULT_ENCODING,
        encoding_errors: str = DEFAULT_ENCODING_ERRORS,
    ):
        """Initialize source tree.

        Args:
            root: Import root directory
            migrated_suffix: Suffix marking migrated files
            encoding: Encoding of plain text files
            encoding_errors: How undecodable bytes in text files are handled
        """
        self.root = Path(root)
        self.migrated_suffix = migrated_suffix
        self.encoding = encoding
        self.encoding_errors = encoding_errors
        self.logger = logger.bind(component='SourceTree')

    def validate(self) -> None:
        """Ensure the import root exists.

        Raises:
            SourceRootMissingError: If the root is missing or not a directory
        """
        if not self.root.is_dir():
            raise SourceRootMissingError(str(self.root))

    def files(self) -> Iterator[SourceFile]:
        """Yield every file below the root in walk order."""
        for dirpath, _dirnames, filenames in os.walk(self.root):
            for filename in filenames:
                yield SourceFile.from_path(
                    Path(dirpath) / filename, migrated_suffix=self.migrated_suffix
                )

    def mark_migrated(self, source_file: SourceFile) -> SourceFile:
        """Rename a file to carry the migrated suffix.

        Returns:
            The renamed source file
        """
        target = source_file.migrated_path
        os.replace(source_file.path, target)
        self.logger.debug(f'Marked {source_file.path} as migrated')
        return SourceFile.from_path(target, migrated_suffix=self.migrated_suffix)

    @staticmethod
    def read_text(
        source_file: SourceFile,
        encoding: str = DEFAULT_ENCODING,
        errors: str = DEFAULT_ENCODING_ERRORS,
    ) -> str:
        """Read the whole file as text.

        With the default error handler undecodable bytes become U+FFFD.
        """
        return source_file.path.read_text(encoding=encoding, errors=errors)
