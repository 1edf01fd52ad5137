"""Data models for migration sources."""

from .source_file import SourceFile

__all__ = ['SourceFile']
