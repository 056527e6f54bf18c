from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.routes.search import to_search_response
from app.core.database import get_db
from app.core.deps import get_identity
from app.core.identity import Identity
from app.schemas.saved_search import SavedSearchCreate, SavedSearchResponse
from app.schemas.search import SearchResponse
from app.services.pager import search_listings
from app.services.saved_searches import (
    apply_saved_search,
    delete_saved_search,
    get_saved_search,
    list_saved_searches,
    save_search,
)

router = APIRouter(prefix="/saved-searches", tags=["saved-searches"])


@router.get("", response_model=list[SavedSearchResponse])
def list_my_saved_searches(db: Session = Depends(get_db), identity: Identity = Depends(get_identity)):
    return list_saved_searches(db, identity)


@router.post("", response_model=SavedSearchResponse, status_code=201)
def create_saved_search(
    payload: SavedSearchCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    return save_search(db, identity, payload.filters, payload.name)


@router.get("/{saved_search_id}", response_model=SavedSearchResponse)
def read_saved_search(saved_search_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_identity)):
    return get_saved_search(db, identity, saved_search_id)


@router.get("/{saved_search_id}/results", response_model=SearchResponse)
def run_saved_search(
    saved_search_id: int,
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    saved = get_saved_search(db, identity, saved_search_id)
    snapshot = saved.filters if limit is None else {**saved.filters, "limit": limit}
    filters = apply_saved_search(snapshot)
    return to_search_response(search_listings(db, filters))


@router.delete("/{saved_search_id}", status_code=204)
def remove_saved_search(saved_search_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_identity)):
    delete_saved_search(db, identity, saved_search_id)
