"""Wiki automation and migration run exceptions."""

from typing import Optional


class AutomationError(Exception):
    """Base exception for remote page automation failures."""

    def __init__(self, message: str, locator: Optional[str] = None):
        """Initialize automation error.

        Args:
            message: Error message
            locator: Element locator involved in the failure, if any
        """
        super().__init__(message)
        self.locator = locator


class ElementNotFoundError(AutomationError):
    """Element could not be located on the current page."""

    pass


class ConditionNotMetError(AutomationError):
    """A retried operation returned a result that failed its check."""

    pass


class ImportFlowError(AutomationError):
    """A remote feature flow reported an error."""

    pass


class MigrationRunError(Exception):
    """Run-scoped failure; the migration cannot proceed."""

    pass


class SourceRootMissingError(MigrationRunError):
    """The configured import root does not exist."""

    def __init__(self, root: str):
        super().__init__(f'Folder {root} does not exist')
        self.root = root


class LoginError(MigrationRunError):
    """Login to the wiki did not succeed."""

    pass
