# =============================================================================
# core/services/curation_service.py - Saved Curations (Drafts)
# =============================================================================
# Saves, lists, resolves and deletes drafts in the shopper's local store.
# Drafts never go to Supabase.
#
# Matching on save:
# 1. an explicit edit id (set when a draft was resumed) wins
# 2. otherwise, with CURATION_MATCH_BY_NAME on, a draft with the same
#    package name is updated in place
# 3. otherwise a new draft with a fresh id is added
# =============================================================================

from __future__ import annotations

import logging
from typing import Iterable

from lib.local_store import LocalStore
from core.models.catalog import CatalogKind
from core.models.curation import Curation, ResolvedCuration
from core.models.package import PackageDetails
from core.models.selection import LineItem, SelectionEntry
from core.pricing import Totals, compute_subtotal, line_total
from core.services.catalog_service import CatalogService
from app.config import settings
from app.exceptions import CurationNotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

CURATIONS_KEY = "curations"


class CurationStore:
    """
    Draft store for one shopper profile.

    Example:
        store = CurationStore(LocalStore.for_namespace(user_id))
        draft = store.save(package, entries)
        store.list_all()
    """

    def __init__(self, store: LocalStore, match_by_name: bool | None = None):
        self.store = store
        self.match_by_name = (
            settings.CURATION_MATCH_BY_NAME if match_by_name is None else match_by_name
        )

    @classmethod
    def for_user(cls, user_id: str) -> CurationStore:
        return cls(LocalStore.for_namespace(str(user_id)))

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def _load(self) -> list[Curation]:
        raw = self.store.get(CURATIONS_KEY, default=[]) or []
        return [Curation.model_validate(item) for item in raw]

    def _dump(self, curations: list[Curation]) -> None:
        self.store.set(CURATIONS_KEY, [c.model_dump(mode="json") for c in curations])

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def save(
        self,
        package: PackageDetails,
        entries: Iterable[SelectionEntry],
        kind: CatalogKind = CatalogKind.CUSTOM,
        edit_id: str | None = None,
    ) -> Curation:
        """
        Save a draft, updating a matching one or adding a new one.

        Args:
            package: Package details (name is required)
            entries: Selected items; at least one
            kind: Catalog the items come from
            edit_id: Id of the draft being edited, if it was resumed

        Returns:
            The stored Curation

        Raises:
            ValidationFailedError: If the name is empty or nothing is selected
        """
        entries = list(entries)
        if package is None or not package.name.strip():
            raise ValidationFailedError("Please enter a package name before saving", field="name")
        if not entries:
            raise ValidationFailedError("No items selected!", field="entries")

        curations = self._load()

        index = None
        if edit_id:
            index = next((i for i, c in enumerate(curations) if c.id == edit_id), None)
            if index is None:
                logger.warning(f"Curation {edit_id} no longer exists, ignoring edit id")
        if index is None and self.match_by_name:
            index = next(
                (i for i, c in enumerate(curations) if c.package.name == package.name),
                None,
            )

        if index is None:
            curation = Curation(package=package, entries=entries, kind=kind)
            curations.append(curation)
            logger.info(f"Saved new curation {curation.id} ('{package.name}')")
        else:
            existing = curations[index]
            curation = existing.model_copy(update={
                "package": package,
                "entries": entries,
                "kind": kind,
            })
            curations[index] = curation
            logger.info(f"Updated curation {curation.id} ('{package.name}')")

        self._dump(curations)
        return curation

    def list_all(self) -> list[Curation]:
        return self._load()

    def get(self, curation_id: str) -> Curation:
        """
        Raises:
            CurationNotFoundError: If no draft has this id
        """
        for curation in self._load():
            if curation.id == curation_id:
                return curation
        raise CurationNotFoundError(curation_id)

    def delete(self, curation_id: str) -> bool:
        """Delete a draft. Returns False if it was already gone."""
        curations = self._load()
        remaining = [c for c in curations if c.id != curation_id]
        if len(remaining) == len(curations):
            return False
        self._dump(remaining)
        logger.info(f"Deleted curation {curation_id}")
        return True

    def resolve_items(self, curation: Curation) -> ResolvedCuration:
        """
        Price a draft with the current catalog.

        Items that no longer exist are dropped from the result and listed in
        missing_item_ids; the rest of the draft still resolves.

        Raises:
            CatalogUnavailableError: If the catalog query itself fails
        """
        catalog = CatalogService.get_items(
            (entry.item_id for entry in curation.entries),
            kind=curation.kind,
        )

        line_items: list[LineItem] = []
        missing: list[str] = []
        for entry in curation.entries:
            item = catalog.get(entry.item_id)
            if item is None:
                logger.warning(
                    f"Curation {curation.id}: item {entry.item_id} no longer in catalog, skipping"
                )
                missing.append(entry.item_id)
                continue
            line_items.append(LineItem(
                item_id=item.id,
                name=item.name,
                price=item.price,
                quantity=entry.quantity,
                quantifiable=item.quantifiable,
                line_total=line_total(item.price, entry.quantity),
                image=item.image,
            ))

        prices = {item_id: item.price for item_id, item in catalog.items()}
        subtotal = compute_subtotal(curation.entries, prices)

        return ResolvedCuration(
            curation=curation,
            line_items=line_items,
            missing_item_ids=missing,
            totals=Totals.from_subtotal(subtotal),
        )
