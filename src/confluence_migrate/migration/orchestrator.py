"""Migration run driver: traversal, dispatch and commit."""

from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..automation.exceptions import AutomationError
from ..automation.session import WikiSession
from ..models.source_file import SourceFile
from .dispatcher import build_strategies, select_family, select_strategy
from .naming import PageNameResolver
from .page_tree import PageExistenceCache, ParentPageCreator
from .source_tree import SourceTree
from .strategy import (
    ImportStrategy,
    MigrationOutcome,
    MigrationStatus,
    StrategyFamily,
)


class RunState(str, Enum):
    """States of a migration run."""

    IDLE = 'idle'
    LOGGED_IN = 'logged_in'
    TRAVERSING = 'traversing'
    RESOLVING_NAME = 'resolving_name'
    ENSURING_PARENTS = 'ensuring_parents'
    IMPORTING = 'importing'
    COMMITTING = 'committing'
    DONE = 'done'


class MigrationSummary(BaseModel):
    """Summary of migration results."""

    total_files: int = Field(..., description='Total files visited')
    successful_migrations: int = Field(..., description='Successful migrations')
    failed_migrations: int = Field(..., description='Failed migrations')
    skipped_migrations: int = Field(..., description='Skipped files')
    pending_migrations: int = Field(
        default=0, description='Files a dry run would import'
    )

    # Timing
    started_at: datetime = Field(..., description='Migration start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Migration completion time'
    )

    # Results by strategy family
    results_by_family: Dict[str, Dict[str, int]] = Field(
        default_factory=dict, description='Results grouped by strategy family'
    )

    # Detailed results
    all_results: List[MigrationOutcome] = Field(
        default_factory=list, description='All migration results'
    )

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


ProgressCallback = Callable[[MigrationOutcome], None]


class MigrationOrchestrator:
    """Runs one migration over the source tree with a single wiki session.

    Files are processed one at a time in walk order. A failure while
    migrating a file is logged and leaves the file unmarked; only login
    and a missing source root stop the run.
    """

    def __init__(
        self,
        session: Optional[WikiSession],
        source_tree: SourceTree,
        resolver: Optional[PageNameResolver] = None,
        parent_creator: Optional[ParentPageCreator] = None,
        strategies: Optional[Mapping[StrategyFamily, ImportStrategy]] = None,
    ):
        """Initialize migration orchestrator.

        Args:
            session: Wiki session; may be None for planning only
            source_tree: Source files to migrate
            resolver: Page name resolver (built from the session if omitted)
            parent_creator: Parent page creator (built from the session if
                omitted)
            strategies: Import strategies by family (built from the session
                if omitted)
        """
        self.session = session
        self.source_tree = source_tree
        self.state = RunState.IDLE
        self.logger = logger.bind(component='MigrationOrchestrator')

        pages = session.pages if session is not None else None
        self.resolver = resolver
        if self.resolver is None and session is not None:
            self.resolver = PageNameResolver(
                source_tree.root,
                session.page_exists,
                replacements=pages.name_replacements,
                stripped_characters=pages.stripped_characters,
                conflict_prefix=pages.conflict_prefix,
            )

        self.cache = PageExistenceCache()
        self.parent_creator = parent_creator
        if self.parent_creator is None and session is not None:
            self.parent_creator = ParentPageCreator(
                session,
                source_tree.root,
                cache=self.cache,
                normalize=self.resolver.directory_page_name,
            )
        elif self.parent_creator is not None:
            self.cache = self.parent_creator.cache

        self.strategies = strategies
        if self.strategies is None and session is not None:
            self.strategies = build_strategies(
                session,
                encoding=source_tree.encoding,
                encoding_errors=source_tree.encoding_errors,
            )

    def login(self) -> None:
        """Log in; a LoginError ends the run."""
        self.session.login()
        self.state = RunState.LOGGED_IN

    def run(self, progress: Optional[ProgressCallback] = None) -> MigrationSummary:
        """Migrate every pending file below the source root.

        Args:
            progress: Called with the outcome of every visited file

        Returns:
            Migration summary

        Raises:
            SourceRootMissingError: If the source root does not exist
            LoginError: If login fails
        """
        if self.session is None:
            raise ValueError('A wiki session is required to run a migration')

        self.source_tree.validate()
        started_at = datetime.now()

        if self.state == RunState.IDLE:
            self.login()

        self.state = RunState.TRAVERSING
        self.logger.info(f'Migrating files from {self.source_tree.root}')

        results = []
        for source_file in self.source_tree.files():
            outcome = self.migrate_file(source_file)
            results.append(outcome)
            if progress is not None:
                progress(outcome)

        self.state = RunState.DONE
        summary = self._summarize(results, started_at)

        self.logger.info(
            f'Migration completed: {summary.successful_migrations} successful, '
            f'{summary.failed_migrations} failed, {summary.skipped_migrations} skipped'
        )
        return summary

    def migrate_file(self, source_file: SourceFile) -> MigrationOutcome:
        """Migrate a single file and commit it on success."""
        if source_file.migrated:
            return self._skipped(source_file, 'already_migrated')

        strategy = select_strategy(source_file.extension, self.strategies)
        if strategy is None:
            self.logger.debug(f'No import strategy for {source_file.path}, skipping')
            return self._skipped(source_file, 'unsupported_extension')

        started_at = datetime.now()
        page_name = None
        try:
            self.state = RunState.RESOLVING_NAME
            page_name = self.resolver.resolve(source_file)

            self.state = RunState.ENSURING_PARENTS
            self.parent_creator.ensure_parent_pages(source_file.directory)

            self.state = RunState.IMPORTING
            outcome = strategy.import_file(source_file, page_name)
        except (AutomationError, OSError, ValueError) as e:
            self.logger.error(f'Failed to migrate {source_file.path}: {e}')
            outcome = MigrationOutcome(
                source_path=str(source_file.path),
                status=MigrationStatus.FAILED,
                success=False,
                page_name=page_name,
                family=strategy.family,
                started_at=started_at,
                completed_at=datetime.now(),
                error_message=str(e),
            )

        if outcome.success:
            outcome = self._commit(source_file, outcome)

        self.state = RunState.TRAVERSING
        return outcome

    def _commit(
        self, source_file: SourceFile, outcome: MigrationOutcome
    ) -> MigrationOutcome:
        self.state = RunState.COMMITTING
        try:
            migrated = self.source_tree.mark_migrated(source_file)
        except OSError as e:
            # Imported but unmarked: a rerun will import the file again
            self.logger.error(
                f'Imported {source_file.path} but could not mark it migrated: {e}'
            )
            return outcome.copy(
                update={
                    'status': MigrationStatus.FAILED,
                    'success': False,
                    'error_message': f'Could not mark file as migrated: {e}',
                    'metadata': {**outcome.metadata, 'imported': True},
                }
            )

        self.logger.info(f'Migrated {source_file.path} -> {migrated.path.name}')
        return outcome

    def plan(self) -> MigrationSummary:
        """Dry run: report what a run would do without touching the wiki."""
        self.source_tree.validate()
        started_at = datetime.now()
        if self.resolver is not None:
            resolver = self.resolver.offline()
        else:
            resolver = PageNameResolver(self.source_tree.root, lambda name: False)

        results = []
        for source_file in self.source_tree.files():
            if source_file.migrated:
                results.append(self._skipped(source_file, 'already_migrated'))
                continue

            family = select_family(source_file.extension)
            if family is None:
                results.append(self._skipped(source_file, 'unsupported_extension'))
                continue

            page_name = resolver.resolve(source_file)
            results.append(
                MigrationOutcome(
                    source_path=str(source_file.path),
                    status=MigrationStatus.PENDING,
                    success=True,
                    page_name=page_name,
                    family=family,
                    metadata={'dry_run': True},
                )
            )

        return self._summarize(results, started_at)

    def _skipped(self, source_file: SourceFile, reason: str) -> MigrationOutcome:
        return MigrationOutcome(
            source_path=str(source_file.path),
            status=MigrationStatus.SKIPPED,
            success=True,
            family=select_family(source_file.extension),
            completed_at=datetime.now(),
            metadata={'reason': reason},
        )

    def _summarize(
        self, results: List[MigrationOutcome], started_at: datetime
    ) -> MigrationSummary:
        results_by_family: Dict[str, Dict[str, int]] = {}
        for result in results:
            key = result.family.value if result.family else 'unsupported'
            counts = results_by_family.setdefault(
                key,
                {'total': 0, 'successful': 0, 'failed': 0, 'skipped': 0, 'pending': 0},
            )
            counts['total'] += 1
            if result.status == MigrationStatus.COMPLETED:
                counts['successful'] += 1
            elif result.status == MigrationStatus.FAILED:
                counts['failed'] += 1
            elif result.status == MigrationStatus.SKIPPED:
                counts['skipped'] += 1
            elif result.status == MigrationStatus.PENDING:
                counts['pending'] += 1

        def count(status: MigrationStatus) -> int:
            return sum(1 for r in results if r.status == status)

        return MigrationSummary(
            total_files=len(results),
            successful_migrations=count(MigrationStatus.COMPLETED),
            failed_migrations=count(MigrationStatus.FAILED),
            skipped_migrations=count(MigrationStatus.SKIPPED),
            pending_migrations=count(MigrationStatus.PENDING),
            started_at=started_at,
            completed_at=datetime.now(),
            results_by_family=results_by_family,
            all_results=results,
        )
