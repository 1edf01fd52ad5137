"""Migration engine - main entry point for migration operations."""

from typing import Callable, Optional

import requests
from loguru import logger

from ..automation.driver import PageAutomation
from ..automation.retry import RetryPolicy
from ..automation.selenium_driver import SeleniumAutomation
from ..automation.session import WikiSession
from ..config.config import Config
from .naming import PageNameResolver
from .orchestrator import MigrationOrchestrator, MigrationSummary, ProgressCallback
from .source_tree import SourceTree

AutomationFactory = Callable[[Config], PageAutomation]


def start_browser(config: Config) -> PageAutomation:
    """Start the configured browser."""
    return SeleniumAutomation.start(
        browser=config.browser.name,
        headless=config.browser.headless,
        page_load_timeout=config.browser.page_load_timeout,
    )


class MigrationEngine:
    """Main migration engine that coordinates the entire migration process."""

    def __init__(
        self,
        config: Config,
        automation_factory: AutomationFactory = start_browser,
    ):
        """Initialize migration engine.

        Args:
            config: Migration configuration
            automation_factory: Creates the page automation channel
        """
        self.config = config
        self.automation_factory = automation_factory
        self.logger = logger.bind(component='MigrationEngine')
        self.source_tree = SourceTree(
            config.source.root,
            migrated_suffix=config.source.migrated_suffix,
            encoding=config.source.encoding,
            encoding_errors=config.source.encoding_errors,
        )

    def create_session(self) -> WikiSession:
        """Start the automation channel and wrap it in a wiki session."""
        automation = self.automation_factory(self.config)
        return WikiSession(
            automation,
            self.config.wiki,
            retry=RetryPolicy(
                max_attempts=self.config.retry.max_attempts,
                delay=self.config.retry.delay,
            ),
            pages=self.config.pages,
            ui=self.config.ui,
        )

    def migrate(self, progress: Optional[ProgressCallback] = None) -> MigrationSummary:
        """Run the migration.

        Args:
            progress: Called with the outcome of every visited file

        Returns:
            Migration summary

        Raises:
            SourceRootMissingError: If the import root does not exist
            LoginError: If login fails
        """
        self.logger.info('Starting Confluence migration')

        # Fail before a browser is started
        self.source_tree.validate()

        session = self.create_session()
        try:
            orchestrator = MigrationOrchestrator(session, self.source_tree)
            summary = orchestrator.run(progress=progress)
            self.logger.info('Migration completed successfully')
            return summary
        except Exception as e:
            self.logger.error(f'Migration failed: {e}')
            raise
        finally:
            session.close()

    def dry_run(self) -> MigrationSummary:
        """List what a migration would import, without a browser."""
        self.logger.info('Starting Confluence migration dry run')

        pages = self.config.pages
        resolver = PageNameResolver(
            self.source_tree.root,
            page_exists=lambda name: False,
            replacements=pages.name_replacements,
            stripped_characters=pages.stripped_characters,
            conflict_prefix=pages.conflict_prefix,
        )
        orchestrator = MigrationOrchestrator(None, self.source_tree, resolver=resolver)
        summary = orchestrator.plan()

        self.logger.info(
            f'Dry run completed: {summary.pending_migrations} files to import, '
            f'{summary.skipped_migrations} skipped'
        )
        return summary

    def count_files(self) -> int:
        """Number of files below the import root."""
        return sum(1 for _ in self.source_tree.files())

    def test_connectivity(self, timeout: int = 10) -> None:
        """Check that the source root exists and the wiki answers.

        Raises:
            SourceRootMissingError: If the import root does not exist
            ConnectionError: If the wiki cannot be reached
        """
        self.source_tree.validate()

        url = self.config.wiki.base_url
        self.logger.info(f'Testing connectivity to {url}')
        try:
            response = requests.head(url, timeout=timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise ConnectionError(f'Cannot connect to {url}: {e}') from e

        if response.status_code >= 500:
            raise ConnectionError(
                f'{url} answered with HTTP {response.status_code}'
            )

        self.logger.info('Connectivity test passed')
