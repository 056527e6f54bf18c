import asyncio
from datetime import datetime

import httpx
import pytest

from app.client import (
    ApiError,
    Conversation,
    MutationState,
    OptimisticMutation,
    PropertyApiClient,
    SavedSearchList,
    SearchFailed,
    SearchPage,
    SearchSession,
    SearchState,
)
from app.main import app
from app.schemas.message import MessageResponse
from app.schemas.property import PropertyResponse
from app.schemas.saved_search import SavedSearchResponse
from app.schemas.search import SearchFilters
from conftest import auth_headers

NOW = datetime(2026, 5, 1, 12, 0)


def listing(listing_id: int, city: str = "Vilnius") -> PropertyResponse:
    return PropertyResponse.model_validate(
        {
            "id": listing_id,
            "broker_id": 1,
            "agency_id": None,
            "city": city,
            "district": None,
            "street": None,
            "house_number": None,
            "heating_type": None,
            "floor_number": None,
            "num_rooms": 2,
            "area_m2": 55.0,
            "price": 120000.0,
            "purpose": "sale",
            "type": "apartment",
            "status": "active",
            "description": None,
            "images": [],
            "created_at": NOW,
            "updated_at": None,
        }
    )


def page_of(*items: PropertyResponse, count: int | None = None, page: int = 1, limit: int = 10) -> SearchPage:
    total = len(items) if count is None else count
    return SearchPage(properties=list(items), count=total, page=page, limit=limit, total_pages=-(-total // limit))


def saved(saved_id: int, name: str) -> SavedSearchResponse:
    return SavedSearchResponse(id=saved_id, user_id=1, name=name, filters={"city": "Vilnius"}, created_at=NOW)


def test_stale_response_is_discarded():
    async def scenario():
        gates: dict[str, asyncio.Event] = {}

        async def fetch(filters: SearchFilters) -> SearchPage:
            gate = gates[filters.city] = asyncio.Event()
            await gate.wait()
            return page_of(listing(1 if filters.city == "Kaunas" else 2, filters.city))

        session = SearchSession(fetch)
        first = asyncio.create_task(session.set_filters(city="Kaunas"))
        await asyncio.sleep(0)
        second = asyncio.create_task(session.set_filters(city="Vilnius"))
        await asyncio.sleep(0)

        assert session.state is SearchState.searching
        assert session.latest_request == 2

        gates["Vilnius"].set()
        assert await second is True
        gates["Kaunas"].set()
        assert await first is False

        assert session.state is SearchState.populated
        assert [p.city for p in session.result.properties] == ["Vilnius"]

    asyncio.run(scenario())


def test_stale_failure_does_not_override_newer_result():
    async def scenario():
        release_first = asyncio.Event()

        async def fetch(filters: SearchFilters) -> SearchPage:
            if filters.city == "Kaunas":
                await release_first.wait()
                raise SearchFailed("Failed to fetch properties", status_code=500)
            return page_of(listing(2))

        session = SearchSession(fetch)
        first = asyncio.create_task(session.set_filters(city="Kaunas"))
        await asyncio.sleep(0)
        assert await session.set_filters(city="Vilnius") is True
        release_first.set()

        assert await first is False
        assert session.state is SearchState.populated
        assert session.error is None

    asyncio.run(scenario())


def test_failed_and_empty_states():
    async def scenario():
        responses = [SearchFailed("Failed to fetch properties", status_code=500), page_of()]

        async def fetch(filters: SearchFilters) -> SearchPage:
            response = responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response

        session = SearchSession(fetch)
        await session.search()
        assert session.state is SearchState.failed
        assert session.error == "Failed to fetch properties"
        assert session.result is None

        await session.search()
        assert session.state is SearchState.empty
        assert session.error is None

    asyncio.run(scenario())


def test_paging_is_bounded_and_filter_changes_reset_page():
    async def scenario():
        requested: list[int] = []

        async def fetch(filters: SearchFilters) -> SearchPage:
            requested.append(filters.page)
            return page_of(listing(filters.page), count=25, page=filters.page)

        session = SearchSession(fetch)
        await session.search()
        assert session.total_pages == 3

        assert await session.previous_page() is False
        await session.next_page()
        await session.next_page()
        assert await session.next_page() is False
        assert session.filters.page == 3

        await session.set_sort("price", "asc")
        assert session.filters.page == 1
        assert session.filters.sort_by.value == "price"

        await session.go_to_page(2)
        await session.set_filters(rooms=3)
        assert session.filters.page == 1
        assert session.filters.rooms == 3
        assert requested == [1, 2, 3, 1, 2, 1]

    asyncio.run(scenario())


def test_apply_saved_search_starts_at_first_page():
    async def scenario():
        async def fetch(filters: SearchFilters) -> SearchPage:
            return page_of(listing(1))

        session = SearchSession(fetch, SearchFilters(page=4, page_size=20, city="Kaunas"))
        await session.apply_saved_search({"city": "Vilnius", "maxPrice": 150000})

        assert session.filters.page == 1
        assert session.filters.page_size == 20
        assert session.filters.city == "Vilnius"
        assert session.filters.max_price == 150000

        await session.reset()
        assert session.filters == SearchFilters(page_size=20)

    asyncio.run(scenario())


def test_optimistic_mutation_commit_and_rollback():
    async def scenario():
        items = ["a", "b"]

        async def ok():
            return "done"

        async def boom():
            raise ApiError("nope")

        committed = OptimisticMutation(lambda: items.pop(), items.append)
        assert await committed.run(ok) == "done"
        assert committed.state is MutationState.committed
        assert items == ["a"]

        rolled_back = OptimisticMutation(lambda: items.pop(), items.append)
        with pytest.raises(ApiError):
            await rolled_back.run(boom)
        assert rolled_back.state is MutationState.rolled_back
        assert items == ["a"]

        with pytest.raises(RuntimeError):
            await rolled_back.run(ok)

    asyncio.run(scenario())


class FakeApi:
    def __init__(self, fail_with: ApiError | None = None):
        self.fail_with = fail_with
        self.deleted: list[int] = []
        self.sent: list[str] = []

    async def delete_saved_search(self, saved_search_id: int) -> None:
        if self.fail_with:
            raise self.fail_with
        self.deleted.append(saved_search_id)

    async def send_message(self, receiver_id: int, content: str, property_id=None) -> MessageResponse:
        if self.fail_with:
            raise self.fail_with
        self.sent.append(content)
        return MessageResponse(
            id=len(self.sent),
            sender_id=1,
            receiver_id=receiver_id,
            property_id=property_id,
            content=content,
            is_read=False,
            sent_at=NOW,
        )


def test_saved_search_delete_removes_immediately():
    async def scenario():
        api = FakeApi()
        searches = SavedSearchList(api, [saved(1, "One"), saved(2, "Two")])

        assert await searches.delete(1) is True
        assert [s.id for s in searches.items] == [2]
        assert api.deleted == [1]

    asyncio.run(scenario())


def test_saved_search_delete_rolls_back_in_place():
    async def scenario():
        api = FakeApi(fail_with=ApiError("Failed to delete saved search.", status_code=500))
        searches = SavedSearchList(api, [saved(1, "One"), saved(2, "Two"), saved(3, "Three")])

        assert await searches.delete(2) is False
        assert [s.id for s in searches.items] == [1, 2, 3]
        assert searches.error == "Failed to delete saved search."

    asyncio.run(scenario())


def test_conversation_send_replaces_placeholder():
    async def scenario():
        conversation = Conversation(FakeApi(), user_id=1, partner_id=2)

        sent = await conversation.send("  Is the flat still available?  ")

        assert sent.id == 1
        assert [m.content for m in conversation.messages] == ["Is the flat still available?"]
        assert all(m.id > 0 for m in conversation.messages)
        assert await conversation.send("   ") is None

    asyncio.run(scenario())


def test_conversation_send_failure_removes_placeholder():
    async def scenario():
        conversation = Conversation(FakeApi(fail_with=ApiError("Recipient not found", status_code=404)), 1, 2)

        assert await conversation.send("Hello") is None
        assert conversation.messages == []
        assert conversation.error == "Recipient not found"

    asyncio.run(scenario())


def test_api_client_against_app(alice, bob, make_property):
    make_property(alice, city="Kaunas", price=90000.0)
    make_property(alice, city="Vilnius", price=150000.0)
    token = auth_headers(alice)["Authorization"].split(" ", 1)[1]

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with PropertyApiClient("http://testserver", token=token, transport=transport) as api:
            session = SearchSession(api.search)
            await session.set_filters(city="Kaunas")
            assert session.state is SearchState.populated
            assert session.result.count == 1

            searches = SavedSearchList(api)
            created = await searches.save("Kaunas", session.filters)
            assert created.filters["city"] == "Kaunas"
            assert await searches.delete(created.id) is True
            await searches.refresh()
            assert searches.items == []

            conversation = Conversation(api, alice.id, bob.id)
            await conversation.send("Hi Bob")
            await conversation.load()
            assert [m.content for m in conversation.messages] == ["Hi Bob"]

        async with PropertyApiClient("http://testserver", transport=httpx.ASGITransport(app=app)) as anonymous:
            with pytest.raises(SearchFailed) as excinfo:
                await anonymous._request("GET", "/search", SearchFailed, params={"minPrice": "cheap"})
            assert excinfo.value.status_code == 400
            assert excinfo.value.message == "Invalid search parameters"

            with pytest.raises(ApiError) as excinfo:
                await anonymous.save_search("Mine", SearchFilters())
            assert excinfo.value.status_code == 401

    asyncio.run(scenario())


@pytest.mark.parametrize(
    "reply",
    [
        httpx.Response(200, text="<html>proxy</html>"),
        httpx.Response(200, json=["not", "a", "page"]),
        httpx.Response(200, json={"properties": [{"id": "x"}], "count": 1}),
    ],
)
def test_garbled_search_response_fails_the_session(reply):
    def handler(request: httpx.Request) -> httpx.Response:
        return reply

    async def scenario():
        async with PropertyApiClient("http://testserver", transport=httpx.MockTransport(handler)) as api:
            session = SearchSession(api.search)

            assert await session.search() is True
            assert session.state is SearchState.failed
            assert session.error == "Received an invalid response from the server."
            assert session.result is None

    asyncio.run(scenario())


def test_garbled_saved_search_list_raises_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    async def scenario():
        async with PropertyApiClient("http://testserver", transport=httpx.MockTransport(handler)) as api:
            with pytest.raises(ApiError) as excinfo:
                await api.list_saved_searches()
            assert excinfo.value.status_code == 200

    asyncio.run(scenario())
