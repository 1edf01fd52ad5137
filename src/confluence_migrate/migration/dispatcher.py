"""Mapping from file extension to import strategy."""

from typing import Dict, Mapping, Optional

from ..automation.session import WikiSession
from .source_tree import DEFAULT_ENCODING, DEFAULT_ENCODING_ERRORS
from .strategy import (
    GenericAttachmentStrategy,
    ImageStrategy,
    ImportStrategy,
    MacroAttachmentStrategy,
    PlainTextStrategy,
    StrategyFamily,
    WordDocumentStrategy,
)

EXTENSION_FAMILIES: Dict[str, StrategyFamily] = {
    '.doc': StrategyFamily.WORD_DOCUMENT,
    '.docx': StrategyFamily.WORD_DOCUMENT,
    '.xls': StrategyFamily.MACRO_ATTACHMENT,
    '.xlsx': StrategyFamily.MACRO_ATTACHMENT,
    '.pdf': StrategyFamily.MACRO_ATTACHMENT,
    '.ppt': StrategyFamily.MACRO_ATTACHMENT,
    '.pptx': StrategyFamily.MACRO_ATTACHMENT,
    '.jpg': StrategyFamily.IMAGE,
    '.jpeg': StrategyFamily.IMAGE,
    '.png': StrategyFamily.IMAGE,
    '.gif': StrategyFamily.IMAGE,
    '.bmp': StrategyFamily.IMAGE,
    '.txt': StrategyFamily.PLAIN_TEXT,
    '.text': StrategyFamily.PLAIN_TEXT,
    '.log': StrategyFamily.PLAIN_TEXT,
    '.md': StrategyFamily.PLAIN_TEXT,
    '.vsd': StrategyFamily.GENERIC_ATTACHMENT,
    '.vsdx': StrategyFamily.GENERIC_ATTACHMENT,
    '.rtf': StrategyFamily.GENERIC_ATTACHMENT,
    '.msg': StrategyFamily.GENERIC_ATTACHMENT,
    '.zip': StrategyFamily.GENERIC_ATTACHMENT,
}


def normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if extension and not extension.startswith('.'):
        extension = '.' + extension
    return extension


def select_family(extension: str) -> Optional[StrategyFamily]:
    """Strategy family for an extension, or None when unsupported."""
    return EXTENSION_FAMILIES.get(normalize_extension(extension))


def build_strategies(
    session: WikiSession,
    encoding: str = DEFAULT_ENCODING,
    encoding_errors: str = DEFAULT_ENCODING_ERRORS,
) -> Dict[StrategyFamily, ImportStrategy]:
    """One strategy instance per family, bound to the session."""
    return {
        StrategyFamily.WORD_DOCUMENT: WordDocumentStrategy(session),
        StrategyFamily.MACRO_ATTACHMENT: MacroAttachmentStrategy(session),
        StrategyFamily.IMAGE: ImageStrategy(session),
        StrategyFamily.PLAIN_TEXT: PlainTextStrategy(
            session, encoding=encoding, encoding_errors=encoding_errors
        ),
        StrategyFamily.GENERIC_ATTACHMENT: GenericAttachmentStrategy(session),
    }


def select_strategy(
    extension: str, strategies: Mapping[StrategyFamily, ImportStrategy]
) -> Optional[ImportStrategy]:
    """Strategy for an extension, or None when unsupported."""
    family = select_family(extension)
    if family is None:
        return None
    return strategies.get(family)
