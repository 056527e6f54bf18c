"""Client-side search view state.

Filter, sort and page changes each fire a request and responses can come back
out of order. Every request gets a sequence number and only the response to
the latest one is applied.
"""

import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from app.client.api_client import ApiError, SearchPage
from app.schemas.search import SearchFilters, SortField, SortOrder
from app.services.saved_searches import apply_saved_search

logger = logging.getLogger(__name__)

FetchPage = Callable[[SearchFilters], Awaitable[SearchPage]]


class SearchState(str, enum.Enum):
    idle = "idle"
    searching = "searching"
    populated = "populated"
    empty = "empty"
    failed = "failed"


class SearchSession:
    def __init__(self, fetch: FetchPage, filters: SearchFilters | None = None):
        self._fetch = fetch
        self._issued = 0
        self.filters = filters or SearchFilters()
        self.state = SearchState.idle
        self.result: SearchPage | None = None
        self.error: str | None = None

    @property
    def latest_request(self) -> int:
        return self._issued

    @property
    def total_pages(self) -> int:
        return self.result.total_pages if self.result else 0

    async def search(self) -> bool:
        """Run the current filters. Returns False when a newer request superseded this one."""
        self._issued += 1
        sequence = self._issued
        filters = self.filters
        self.state = SearchState.searching
        self.error = None

        try:
            page = await self._fetch(filters)
        except ApiError as exc:
            if sequence != self._issued:
                return False
            logger.warning("Search request %s failed: %s", sequence, exc.message)
            self.result = None
            self.error = exc.message or "Failed to fetch search results."
            self.state = SearchState.failed
            return True

        if sequence != self._issued:
            logger.debug("Discarding stale search response %s (latest is %s)", sequence, self._issued)
            return False

        self.result = page
        self.state = SearchState.populated if page.properties else SearchState.empty
        return True

    def _replace(self, **changes: Any) -> SearchFilters:
        return SearchFilters.model_validate({**self.filters.model_dump(), **changes})

    async def set_filters(self, **changes: Any) -> bool:
        self.filters = self._replace(**changes, page=1)
        return await self.search()

    async def set_sort(self, sort_by: SortField | str, sort_order: SortOrder | str) -> bool:
        self.filters = self._replace(sort_by=sort_by, sort_order=sort_order, page=1)
        return await self.search()

    async def go_to_page(self, page: int) -> bool:
        self.filters = self._replace(page=max(page, 1))
        return await self.search()

    async def next_page(self) -> bool:
        if self.filters.page >= self.total_pages:
            return False
        return await self.go_to_page(self.filters.page + 1)

    async def previous_page(self) -> bool:
        if self.filters.page <= 1:
            return False
        return await self.go_to_page(self.filters.page - 1)

    async def apply_saved_search(self, snapshot: dict) -> bool:
        applied = apply_saved_search(snapshot)
        self.filters = applied.model_copy(update={"page_size": self.filters.page_size})
        return await self.search()

    async def reset(self) -> bool:
        self.filters = SearchFilters(page_size=self.filters.page_size)
        return await self.search()
