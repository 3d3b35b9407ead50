from __future__ import annotations

from .fetching import (
    ItemFilter,
    ProjectItemsFilter,
    ProjectStatusSource,
    RepositoryFilter,
    SingleItemFilter,
    SourceItemFetcher,
)
from .ledger import DestinationWriter

__all__ = [
    "DestinationWriter",
    "ItemFilter",
    "ProjectItemsFilter",
    "ProjectStatusSource",
    "RepositoryFilter",
    "SingleItemFilter",
    "SourceItemFetcher",
]
