"""Source file model."""

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

DEFAULT_MIGRATED_SUFFIX = '.migrated'


class SourceFile(BaseModel):
    """A file found under the import root."""

    path: Path = Field(..., description='Path of the file on disk')
    extension: str = Field(..., description='Lower-cased extension, with dot')
    migrated: bool = Field(
        default=False, description='File carries the migrated suffix'
    )
    migrated_suffix: str = Field(
        default=DEFAULT_MIGRATED_SUFFIX, description='Sentinel suffix'
    )

    @classmethod
    def from_path(
        cls, path: Path, migrated_suffix: str = DEFAULT_MIGRATED_SUFFIX
    ) -> 'SourceFile':
        """Build a source file from a path, detecting the sentinel suffix."""
        path = Path(path)
        migrated = path.name.endswith(migrated_suffix)
        original_name = path.name[: -len(migrated_suffix)] if migrated else path.name

        return cls(
            path=path,
            extension=Path(original_name).suffix.lower(),
            migrated=migrated,
            migrated_suffix=migrated_suffix,
        )

    @property
    def name(self) -> str:
        """File name as it was before migration."""
        if self.migrated:
            return self.path.name[: -len(self.migrated_suffix)]
        return self.path.name

    @property
    def stem(self) -> str:
        """File name without extension."""
        return Path(self.name).stem

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def migrated_path(self) -> Path:
        return self.path.with_name(self.name + self.migrated_suffix)

    def directory_parts(self, root: Path) -> List[str]:
        """Directory names between the import root and this file.

        Raises:
            ValueError: If the file is not under root
        """
        return list(self.directory.relative_to(root).parts)

    def __str__(self) -> str:
        return str(self.path)
