import json
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, StorageError, ValidationError
from app.core.identity import Identity
from app.models.saved_search import SavedSearch
from app.schemas.search import SearchFilters
from app.services.audit import audit_event

logger = logging.getLogger(__name__)

# Pagination is view state, not part of what a user saves.
SNAPSHOT_EXCLUDE = {"page", "page_size"}


def prune_filters(filters: SearchFilters) -> dict:
    """Snapshot ``filters`` with camelCase keys and no absent or blank values."""
    data = filters.model_dump(mode="json", by_alias=True, exclude=SNAPSHOT_EXCLUDE)
    return {key: value for key, value in data.items() if value is not None and value != ""}


def filters_from_snapshot(snapshot: dict) -> SearchFilters:
    try:
        return SearchFilters.model_validate({**snapshot, "page": 1})
    except PydanticValidationError as exc:
        raise ValidationError("Saved filters are invalid.", details=str(exc)) from exc


def apply_saved_search(saved: SavedSearch | dict) -> SearchFilters:
    """Filters to re-run a saved search with. Always starts from page 1."""
    snapshot = saved.filters if isinstance(saved, SavedSearch) else saved
    return filters_from_snapshot(snapshot or {})


def encode_filters_param(filters: SearchFilters | dict) -> str:
    snapshot = prune_filters(filters) if isinstance(filters, SearchFilters) else filters
    return json.dumps(snapshot, separators=(",", ":"), sort_keys=True)


def decode_filters_param(raw: str) -> SearchFilters:
    try:
        snapshot = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("Could not apply filters from URL.", details=str(exc)) from exc
    if not isinstance(snapshot, dict):
        raise ValidationError("Could not apply filters from URL.")
    return filters_from_snapshot(snapshot)


def save_search(db: Session, identity: Identity, filters: SearchFilters, name: str) -> SavedSearch:
    user_id = identity.require_user_id("You must be logged in to save a search.")
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please provide a name for your search.")

    saved = SavedSearch(user_id=user_id, name=name, filters=prune_filters(filters))
    try:
        db.add(saved)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Saving search %r for user %s failed: %s", name, user_id, exc)
        raise StorageError("Failed to save search.", details=str(exc)) from exc

    db.refresh(saved)
    audit_event(db, "saved_search_create", "saved_search", user_id=user_id, resource_id=saved.id)
    return saved


def list_saved_searches(db: Session, identity: Identity) -> list[SavedSearch]:
    user_id = identity.require_user_id()
    stmt = (
        select(SavedSearch)
        .where(SavedSearch.user_id == user_id)
        .order_by(SavedSearch.created_at.desc(), SavedSearch.id.desc())
    )
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load saved searches.", details=str(exc)) from exc


def get_saved_search(db: Session, identity: Identity, saved_search_id: int) -> SavedSearch:
    user_id = identity.require_user_id()
    # Other users' rows are treated as invisible rather than forbidden.
    saved = db.scalar(
        select(SavedSearch).where(SavedSearch.id == saved_search_id, SavedSearch.user_id == user_id)
    )
    if saved is None:
        raise NotFoundError("Saved search not found")
    return saved


def delete_saved_search(db: Session, identity: Identity, saved_search_id: int) -> None:
    saved = get_saved_search(db, identity, saved_search_id)
    try:
        db.delete(saved)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Deleting saved search %s failed: %s", saved_search_id, exc)
        raise StorageError("Failed to delete saved search.", details=str(exc)) from exc

    audit_event(db, "saved_search_delete", "saved_search", user_id=identity.user_id, resource_id=saved_search_id)
