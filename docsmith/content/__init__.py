"""Markdown conversion and external content import."""

from .importer import ContentImporter, ManifestEntry, clean_name
from .markdown import MarkdownConverter

__all__ = ["ContentImporter", "ManifestEntry", "MarkdownConverter", "clean_name"]
