"""Remote page automation: interface, browser adapter, session and retry."""

from .driver import Locator, PageAutomation
from .exceptions import (
    AutomationError,
    ElementNotFoundError,
    ConditionNotMetError,
    ImportFlowError,
    MigrationRunError,
    SourceRootMissingError,
    LoginError,
)
from .retry import RetryPolicy, with_retry
from .session import WikiSession, MacroSpec

__all__ = [
    'Locator',
    'PageAutomation',
    'AutomationError',
    'ElementNotFoundError',
    'ConditionNotMetError',
    'ImportFlowError',
    'MigrationRunError',
    'SourceRootMissingError',
    'LoginError',
    'RetryPolicy',
    'with_retry',
    'WikiSession',
    'MacroSpec',
]
