"""Offline reader for multistream MediaWiki dumps."""

__version__ = "0.1.0"
