from __future__ import annotations

from .client import NotionAPIError, NotionLedger

__all__ = ["NotionAPIError", "NotionLedger"]
