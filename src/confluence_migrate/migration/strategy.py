"""Import strategy interface and the per-file-type implementations."""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..automation.exceptions import AutomationError
from ..automation.session import (
    EXCEL_MACRO,
    PDF_MACRO,
    SLIDES_MACRO,
    MacroSpec,
    WikiSession,
)
from ..models.source_file import SourceFile
from .source_tree import DEFAULT_ENCODING, DEFAULT_ENCODING_ERRORS, SourceTree


class MigrationStatus(str, Enum):
    """Migration status enumeration."""

    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    SKIPPED = 'skipped'


class StrategyFamily(str, Enum):
    """File type families, one import strategy each."""

    WORD_DOCUMENT = 'word_document'
    MACRO_ATTACHMENT = 'macro_attachment'
    IMAGE = 'image'
    PLAIN_TEXT = 'plain_text'
    GENERIC_ATTACHMENT = 'generic_attachment'


class MigrationOutcome(BaseModel):
    """Result of migrating one source file."""

    source_path: str = Field(..., description='Path of the source file')
    status: MigrationStatus = Field(..., description='Migration status')
    success: bool = Field(..., description='Migration was successful')

    page_name: Optional[str] = Field(default=None, description='Target page')
    family: Optional[StrategyFamily] = Field(
        default=None, description='Strategy family used'
    )

    # Timing information
    started_at: datetime = Field(
        default_factory=datetime.now, description='Migration start time'
    )
    completed_at: Optional[datetime] = Field(
        default=None, description='Migration completion time'
    )

    # Error information
    error_message: Optional[str] = Field(
        default=None, description='Error message if failed'
    )

    # Metadata
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description='Additional metadata'
    )

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


class ImportStrategy(ABC):
    """Imports one source file as a child page of the current page.

    Implementations must not raise for failures of the remote flow; they
    report them as a failed outcome so the run can continue.
    """

    family: StrategyFamily

    def __init__(self, session: WikiSession):
        """Initialize import strategy.

        Args:
            session: Wiki session positioned on the parent page
        """
        self.session = session
        self.logger = logger.bind(component=self.__class__.__name__)

    @abstractmethod
    def import_file(self, source_file: SourceFile, page_name: str) -> MigrationOutcome:
        """Import a file as page_name.

        Args:
            source_file: File to import
            page_name: Resolved target page name

        Returns:
            Migration outcome
        """
        pass

    def run_steps(self, source_file: SourceFile, page_name: str, steps) -> MigrationOutcome:
        """Run the strategy's remote steps and turn failures into an outcome."""
        started_at = datetime.now()
        try:
            steps()
        except (AutomationError, OSError, UnicodeDecodeError) as e:
            self.logger.error(f'Failed to import {source_file.path}: {e}')
            return self.create_outcome(
                source_file,
                page_name,
                MigrationStatus.FAILED,
                started_at,
                error_message=str(e),
            )

        self.logger.info(f'Imported {source_file.path} as page {page_name!r}')
        return self.create_outcome(
            source_file, page_name, MigrationStatus.COMPLETED, started_at
        )

    def create_outcome(
        self,
        source_file: SourceFile,
        page_name: str,
        status: MigrationStatus,
        started_at: datetime,
        error_message: Optional[str] = None,
        **kwargs,
    ) -> MigrationOutcome:
        return MigrationOutcome(
            source_path=str(source_file.path),
            status=status,
            success=status == MigrationStatus.COMPLETED,
            page_name=page_name,
            family=self.family,
            started_at=started_at,
            completed_at=datetime.now(),
            error_message=error_message,
            **kwargs,
        )


class WordDocumentStrategy(ImportStrategy):
    """Converts a Word document into page content with the word importer."""

    family = StrategyFamily.WORD_DOCUMENT

    def import_file(self, source_file: SourceFile, page_name: str) -> MigrationOutcome:
        started_at = datetime.now()
        file_path = str(source_file.path.resolve())

        try:
            self.session.create_page(page_name, '')
            self.session.import_word_document(file_path)
        except AutomationError as e:
            # Page content is unknown now, so nothing else is added to it
            self.logger.error(f'Word import of {source_file.path} failed: {e}')
            return self.create_outcome(
                source_file,
                page_name,
                MigrationStatus.FAILED,
                started_at,
                error_message=f'Word import failed: {e}',
            )

        def finish():
            self.session.attach_file(file_path)
            self.session.add_provenance_note()

        return self.run_steps(source_file, page_name, finish)


class MacroAttachmentStrategy(ImportStrategy):
    """Attaches the file and renders it inline with a viewer macro."""

    family = StrategyFamily.MACRO_ATTACHMENT

    MACROS = {
        '.xls': EXCEL_MACRO,
        '.xlsx': EXCEL_MACRO,
        '.pdf': PDF_MACRO,
        '.ppt': SLIDES_MACRO,
        '.pptx': SLIDES_MACRO,
    }

    @classmethod
    def macro_for(cls, extension: str) -> MacroSpec:
        """Viewer macro for an extension; PDF viewer for anything unknown."""
        return cls.MACROS.get(extension.lower(), PDF_MACRO)

    def import_file(self, source_file: SourceFile, page_name: str) -> MigrationOutcome:
        macro = self.macro_for(source_file.extension)

        def steps():
            self.session.create_page(page_name, self.session.pages.provenance_note)
            self.session.attach_file(str(source_file.path.resolve()))
            self.session.insert_attachment_macro(macro)

        return self.run_steps(source_file, page_name, steps)


class ImageStrategy(ImportStrategy):
    """Attaches an image and embeds it in the page body."""

    family = StrategyFamily.IMAGE

    def import_file(self, source_file: SourceFile, page_name: str) -> MigrationOutcome:
        def steps():
            self.session.create_page(page_name, self.session.pages.provenance_note)
            self.session.attach_file(str(source_file.path.resolve()))
            self.session.embed_first_attached_image()

        return self.run_steps(source_file, page_name, steps)


class PlainTextStrategy(ImportStrategy):
    """Uses the file's text as the page body."""

    family = StrategyFamily.PLAIN_TEXT

    def __init__(
        self,
        session: WikiSession,
        encoding: str = DEFAULT_ENCODING,
        encoding_errors: str = DEFAULT_ENCODING_ERRORS,
    ):
        super().__init__(session)
        self.encoding = encoding
        self.encoding_errors = encoding_errors

    def import_file(self, source_file: SourceFile, page_name: str) -> MigrationOutcome:
        def steps():
            body = SourceTree.read_text(
                source_file, encoding=self.encoding, errors=self.encoding_errors
            )
            self.session.create_page(page_name, body)

        return self.run_steps(source_file, page_name, steps)


class GenericAttachmentStrategy(ImportStrategy):
    """Attaches the file to a page carrying the provenance note."""

    family = StrategyFamily.GENERIC_ATTACHMENT

    def import_file(self, source_file: SourceFile, page_name: str) -> MigrationOutcome:
        def steps():
            self.session.create_page(page_name, self.session.pages.provenance_note)
            self.session.attach_file(str(source_file.path.resolve()))

        return self.run_steps(source_file, page_name, steps)
