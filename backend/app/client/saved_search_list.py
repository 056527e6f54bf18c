import logging

from app.client.api_client import ApiError, PropertyApiClient
from app.client.optimistic import OptimisticMutation
from app.schemas.saved_search import SavedSearchResponse
from app.schemas.search import SearchFilters

logger = logging.getLogger(__name__)


class SavedSearchList:
    """The caller's saved searches as shown on the profile page."""

    def __init__(self, api: PropertyApiClient, items: list[SavedSearchResponse] | None = None):
        self._api = api
        self.items: list[SavedSearchResponse] = list(items or [])
        self.error: str | None = None

    async def refresh(self) -> None:
        self.items = await self._api.list_saved_searches()

    async def save(self, name: str, filters: SearchFilters) -> SavedSearchResponse | None:
        self.error = None
        if not name.strip():
            self.error = "Please provide a name for your search."
            return None
        try:
            saved = await self._api.save_search(name, filters)
        except ApiError as exc:
            self.error = exc.message or "Failed to save search."
            return None
        self.items.insert(0, saved)
        return saved

    async def delete(self, saved_search_id: int) -> bool:
        """Remove the item right away and put it back if the server refuses.

        Callers confirm with the user first; there is no undo.
        """
        self.error = None

        def apply():
            for index, item in enumerate(self.items):
                if item.id == saved_search_id:
                    del self.items[index]
                    return index, item
            return None

        def restore(removed):
            if removed is None:
                return
            index, item = removed
            if all(existing.id != item.id for existing in self.items):
                self.items.insert(min(index, len(self.items)), item)

        mutation = OptimisticMutation(apply, restore)
        try:
            await mutation.run(lambda: self._api.delete_saved_search(saved_search_id))
        except ApiError as exc:
            logger.warning("Deleting saved search %s failed: %s", saved_search_id, exc.message)
            self.error = exc.message or "Failed to delete saved search."
            return False
        return True
