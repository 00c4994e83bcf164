"""Extract translatable keys from source code and merge them into PO catalogs."""

from __future__ import annotations

__version__ = "0.4.0"

APP_NAME = "poextract"
