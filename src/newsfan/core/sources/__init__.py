"""
News source catalog.
"""

from .catalog import SourceCatalog, DEFAULT_SOURCES_FILE

__all__ = ['SourceCatalog', 'DEFAULT_SOURCES_FILE']
