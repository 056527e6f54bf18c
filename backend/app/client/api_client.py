import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.schemas.message import MessageResponse
from app.schemas.property import PropertyResponse
from app.schemas.saved_search import SavedSearchResponse
from app.schemas.search import SearchFilters
from app.services.saved_searches import prune_filters

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class SearchFailed(ApiError):
    pass


@dataclass
class SearchPage:
    properties: list[PropertyResponse] = field(default_factory=list)
    count: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "SearchPage":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return cls(
            properties=[PropertyResponse.model_validate(item) for item in data.get("properties") or []],
            count=data.get("count") or 0,
            page=data.get("page") or 1,
            limit=data.get("limit") or get_settings().SEARCH_PAGE_SIZE,
            total_pages=data.get("totalPages") or 0,
        )


def search_params(filters: SearchFilters) -> dict:
    params = prune_filters(filters)
    params["page"] = filters.page
    params["limit"] = filters.page_size
    return params


def _error_message(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return f"API Error: {response.reason_phrase}", None
    if isinstance(body, dict):
        if "error" in body:
            return str(body["error"]), body.get("details")
        if "detail" in body:
            return str(body["detail"]), None
    return f"API Error: {response.reason_phrase}", None


class PropertyApiClient:
    """Async client for the property API, used by the search and messaging views."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._prefix = get_settings().API_V1_STR
        self._http = httpx.AsyncClient(base_url=base_url, headers=headers, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "PropertyApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, error_cls: type[ApiError] = ApiError, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, f"{self._prefix}{path}", **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise error_cls("Could not reach the server.", details=str(exc)) from exc
        if response.is_error:
            message, details = _error_message(response)
            raise error_cls(message, status_code=response.status_code, details=details)
        return response

    def _decode(self, response: httpx.Response, parse: Callable[[Any], T], error_cls: type[ApiError] = ApiError) -> T:
        try:
            return parse(response.json())
        except (ValueError, TypeError, PydanticValidationError) as exc:
            logger.warning("Unexpected response body from %s: %s", response.request.url.path, exc)
            raise error_cls("Received an invalid response from the server.", response.status_code, str(exc)) from exc

    async def search(self, filters: SearchFilters) -> SearchPage:
        response = await self._request("GET", "/search", SearchFailed, params=search_params(filters))
        return self._decode(response, SearchPage.from_json, SearchFailed)

    async def list_saved_searches(self) -> list[SavedSearchResponse]:
        response = await self._request("GET", "/saved-searches")
        return self._decode(response, lambda body: [SavedSearchResponse.model_validate(item) for item in body])

    async def save_search(self, name: str, filters: SearchFilters) -> SavedSearchResponse:
        payload = {"name": name, "filters": prune_filters(filters)}
        response = await self._request("POST", "/saved-searches", json=payload)
        return self._decode(response, SavedSearchResponse.model_validate)

    async def delete_saved_search(self, saved_search_id: int) -> None:
        await self._request("DELETE", f"/saved-searches/{saved_search_id}")

    async def conversation(self, partner_id: int) -> list[MessageResponse]:
        response = await self._request("GET", f"/messages/{partner_id}")
        return self._decode(response, lambda body: [MessageResponse.model_validate(item) for item in body])

    async def send_message(self, receiver_id: int, content: str, property_id: int | None = None) -> MessageResponse:
        payload = {"receiver_id": receiver_id, "content": content, "property_id": property_id}
        response = await self._request("POST", "/messages", json=payload)
        return self._decode(response, MessageResponse.model_validate)
