# =============================================================================
# core/models/curation.py - Curation (Draft) Schemas
# =============================================================================
# A curation is a named, unsubmitted selection saved on the shopper's device
# so it can be resumed later. Curations never leave the local store.
#
# Prices are NOT stored with a curation: a resolved curation is always priced
# from the current catalog.
# =============================================================================

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from core.pricing import Totals

from .catalog import CatalogKind
from .package import PackageDetails
from .selection import LineItem, SelectionEntry


def _new_curation_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Curation(BaseModel):
    """
    A saved draft.

    Example:
        {
            "id": "0b7f9c1e-...",
            "package": {"name": "Mum's birthday", "budget": "15000", "referral_code": null},
            "entries": [{"item_id": "42", "quantity": 1}],
            "kind": "custom",
            "created_at": "2026-10-19T09:30:00Z"
        }
    """

    id: str = Field(default_factory=_new_curation_id)
    package: PackageDetails
    entries: list[SelectionEntry] = Field(default_factory=list)
    kind: CatalogKind = CatalogKind.CUSTOM
    created_at: datetime = Field(default_factory=_utcnow)


class ResolvedCuration(BaseModel):
    """A curation joined with current catalog data, ready for display."""

    curation: Curation
    line_items: list[LineItem] = Field(default_factory=list)

    # Entries whose item no longer exists in the catalog
    missing_item_ids: list[str] = Field(default_factory=list)

    totals: Totals
