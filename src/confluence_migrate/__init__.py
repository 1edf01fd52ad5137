"""Confluence Folder Migration Tool

Migrates a folder tree of documents, spreadsheets, presentations, images and
other files into a Confluence space, mirroring folders as a page hierarchy.
"""

__version__ = '0.1.0'
__author__ = 'Confluence Migration Team'
__email__ = 'team@example.com'

from .cli.main import main

__all__ = ['main']
