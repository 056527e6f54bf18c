from app.client.api_client import ApiError, PropertyApiClient, SearchFailed, SearchPage
from app.client.conversation import Conversation
from app.client.optimistic import MutationState, OptimisticMutation
from app.client.saved_search_list import SavedSearchList
from app.client.search_session import SearchSession, SearchState

__all__ = [
    "ApiError",
    "PropertyApiClient",
    "SearchFailed",
    "SearchPage",
    "Conversation",
    "MutationState",
    "OptimisticMutation",
    "SavedSearchList",
    "SearchSession",
    "SearchState",
]
