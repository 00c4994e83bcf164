"""Extraction, merge and file-level services."""
