"""Migration engine, orchestrator and import strategies."""

from .strategy import (
    ImportStrategy,
    MigrationOutcome,
    MigrationStatus,
    StrategyFamily,
    WordDocumentStrategy,
    MacroAttachmentStrategy,
    ImageStrategy,
    PlainTextStrategy,
    GenericAttachmentStrategy,
)
from .dispatcher import select_family, select_strategy, build_strategies
from .naming import PageNameResolver, normalize_page_name, page_names_equal
from .page_tree import PageExistenceCache, ParentPageCreator
from .source_tree import SourceTree
from .orchestrator import MigrationOrchestrator, MigrationSummary, RunState
from .engine import MigrationEngine

__all__ = [
    'ImportStrategy',
    'MigrationOutcome',
    'MigrationStatus',
    'StrategyFamily',
    'WordDocumentStrategy',
    'MacroAttachmentStrategy',
    'ImageStrategy',
    'PlainTextStrategy',
    'GenericAttachmentStrategy',
    'select_family',
    'select_strategy',
    'build_strategies',
    'PageNameResolver',
    'normalize_page_name',
    'page_names_equal',
    'PageExistenceCache',
    'ParentPageCreator',
    'SourceTree',
    'MigrationOrchestrator',
    'MigrationSummary',
    'RunState',
    'MigrationEngine',
]
