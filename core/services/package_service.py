# =============================================================================
# core/services/package_service.py - Package Sessions
# =============================================================================
# A package session is one shopper building one package: the package form
# details plus the SelectionState. The state lives in the shopper's local
# store under SELECTION_KEY and is reloaded on every call, so each request
# works from the stored state rather than from something cached in memory.
#
# Every applied change is written back immediately and announced to the
# registered change listeners (the WebSocket layer pushes full snapshots).
# =============================================================================

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable

from pydantic import ValidationError

from lib.local_store import LocalStore
from core.models.catalog import CatalogKind
from core.models.curation import Curation
from core.models.order import OrderReceipt
from core.models.package import PackageDetails
from core.models.selection import SelectionAction
from core.selection import SelectionState
from core.services.catalog_service import CatalogService
from core.services.curation_service import CurationStore
from core.services.order_service import OrderService, default_curated_box_name
from app.auth.models import AuthUser
from app.exceptions import NoActivePackageError, ValidationFailedError

logger = logging.getLogger(__name__)

SELECTION_KEY = "selection"

ChangeListener = Callable[[str, dict[str, Any]], None]


def _validation_message(error: ValidationError) -> str:
    """First validation message, without pydantic's 'Value error, ' prefix."""
    message = error.errors()[0].get("msg", str(error))
    return message.removeprefix("Value error, ")


class PackageSessionService:
    """
    Service for the in-progress package of each shopper.

    Example:
        PackageSessionService.start_package(user_id, name="Gift", budget=15000)
        PackageSessionService.apply(user_id, SelectionAction(type="increment", item_id="42"))
        receipt = PackageSessionService.checkout(user)
    """

    _listeners: list[ChangeListener] = []

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    @classmethod
    def add_listener(cls, listener: ChangeListener) -> None:
        cls._listeners.append(listener)

    @classmethod
    def remove_listener(cls, listener: ChangeListener) -> None:
        if listener in cls._listeners:
            cls._listeners.remove(listener)

    @classmethod
    def _notify(cls, user_id: str, state: SelectionState) -> None:
        snapshot = state.snapshot()
        for listener in list(cls._listeners):
            try:
                listener(user_id, snapshot)
            except Exception as e:
                logger.warning(f"Selection listener failed for user {user_id}: {e}")

    # -------------------------------------------------------------------------
    # State storage
    # -------------------------------------------------------------------------

    @staticmethod
    def _store(user_id: str) -> LocalStore:
        return LocalStore.for_namespace(str(user_id))

    @classmethod
    def _persist(cls, user_id: str, state: SelectionState) -> None:
        cls._store(user_id).set(SELECTION_KEY, state.snapshot())
        cls._notify(user_id, state)

    @classmethod
    def _attach(cls, user_id: str, state: SelectionState) -> SelectionState:
        state.subscribe(lambda s: cls._persist(user_id, s))
        return state

    @classmethod
    def get_state(cls, user_id: str) -> SelectionState:
        """Load the shopper's selection (empty if nothing is stored)."""
        data = cls._store(user_id).get(SELECTION_KEY)
        state = SelectionState.from_snapshot(data) if data else SelectionState()
        return cls._attach(user_id, state)

    @classmethod
    def _require_package(cls, user_id: str) -> SelectionState:
        state = cls.get_state(user_id)
        if state.package is None:
            raise NoActivePackageError(str(user_id))
        return state

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    @classmethod
    def start_package(
        cls,
        user_id: str,
        name: str | None = None,
        budget: Decimal | float | str | None = None,
        referral_code: str | None = None,
        kind: CatalogKind = CatalogKind.CUSTOM,
    ) -> SelectionState:
        """
        Start a new package, discarding any selection in progress.

        Curated boxes have no budget and default to a dated name.

        Raises:
            ValidationFailedError: If the name is empty or the budget is below the packaging fee
        """
        if kind is CatalogKind.CURATED:
            name = name or default_curated_box_name()
            budget = None

        try:
            package = PackageDetails(name=name, budget=budget, referral_code=referral_code)
        except ValidationError as e:
            raise ValidationFailedError(_validation_message(e))

        state = cls._attach(user_id, SelectionState(package=package, kind=kind))
        cls._persist(user_id, state)
        logger.info(f"Started {kind.value} package '{package.name}' for user {user_id}")
        return state

    @classmethod
    def apply(cls, user_id: str, action: SelectionAction) -> SelectionState:
        """
        Apply one selection change.

        Toggle and increment re-read the item from the catalog so the budget
        check uses its current price.

        Raises:
            NoActivePackageError: If no package was started
            BudgetExceededError: If the change would exceed the budget
            InvalidSelectionError: If the change doesn't fit the item
            ItemNotFoundError: If the item doesn't exist
        """
        state = cls._require_package(user_id)
        state.apply(action, resolve_item=lambda item_id: CatalogService.get_item(item_id, state.kind))
        return state

    @classmethod
    def reset(cls, user_id: str) -> None:
        """Forget the package in progress."""
        cls._store(user_id).delete(SELECTION_KEY)
        cls._notify(user_id, SelectionState())

    # -------------------------------------------------------------------------
    # Drafts
    # -------------------------------------------------------------------------

    @classmethod
    def save_draft(cls, user_id: str) -> Curation:
        """
        Save the current selection as a draft.

        The draft id is remembered so later saves update the same draft.

        Raises:
            NoActivePackageError: If no package was started
            ValidationFailedError: If nothing is selected
        """
        state = cls._require_package(user_id)
        curation = CurationStore.for_user(user_id).save(
            state.package,
            state.entries,
            kind=state.kind,
            edit_id=state.edit_curation_id,
        )
        state.edit_curation_id = curation.id
        cls._persist(user_id, state)
        return curation

    @classmethod
    def resume_curation(cls, user_id: str, curation_id: str) -> SelectionState:
        """
        Load a draft into the package session for editing.

        Items that have left the catalog are dropped from the selection.

        Raises:
            CurationNotFoundError: If the draft doesn't exist
        """
        curation = CurationStore.for_user(user_id).get(curation_id)
        catalog = CatalogService.get_items((e.item_id for e in curation.entries), kind=curation.kind)

        entries = [e for e in curation.entries if e.item_id in catalog]
        state = cls._attach(user_id, SelectionState(
            package=curation.package,
            kind=curation.kind,
            entries=entries,
            items=list(catalog.values()),
            edit_curation_id=curation.id,
        ))
        cls._persist(user_id, state)
        logger.info(f"Resumed curation {curation.id} for user {user_id}")
        return state

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    @classmethod
    def checkout(cls, user: AuthUser, delete_source_draft: bool = False) -> OrderReceipt:
        """
        Submit the package in progress.

        On success the selection is cleared. When the package came from a
        draft, the draft is deleted only if delete_source_draft is set;
        otherwise the receipt offers the deletion.

        On failure nothing changes: the selection and any draft stay as they were.
        """
        user_id = str(user.id)
        state = cls._require_package(user_id)

        receipt = OrderService.submit(
            user,
            state.package,
            state.entries,
            kind=state.kind,
            source_curation_id=state.edit_curation_id,
        )

        cls.reset(user_id)

        if delete_source_draft and receipt.source_curation_id:
            deleted = CurationStore.for_user(user_id).delete(receipt.source_curation_id)
            receipt = receipt.model_copy(update={
                "draft_deleted": deleted,
                "offer_draft_deletion": False,
            })

        return receipt
