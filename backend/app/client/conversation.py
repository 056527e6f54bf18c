import itertools
from datetime import datetime, timezone

from app.client.api_client import ApiError, PropertyApiClient
from app.client.optimistic import OptimisticMutation
from app.schemas.message import MessageResponse

_temp_ids = itertools.count(1)


class Conversation:
    """One message thread between the signed-in user and a partner."""

    def __init__(self, api: PropertyApiClient, user_id: int, partner_id: int):
        self._api = api
        self.user_id = user_id
        self.partner_id = partner_id
        self.messages: list[MessageResponse] = []
        self.error: str | None = None

    async def load(self) -> None:
        self.error = None
        try:
            self.messages = await self._api.conversation(self.partner_id)
        except ApiError as exc:
            self.error = exc.message or "Could not load messages for this conversation."
            self.messages = []

    async def send(self, content: str) -> MessageResponse | None:
        content = content.strip()
        if not content:
            return None
        self.error = None

        # Negative ids never collide with server ids.
        placeholder = MessageResponse(
            id=-next(_temp_ids),
            sender_id=self.user_id,
            receiver_id=self.partner_id,
            property_id=None,
            content=content,
            is_read=False,
            sent_at=datetime.now(timezone.utc),
        )

        def apply():
            self.messages.append(placeholder)
            return placeholder.id

        def restore(temp_id):
            self.messages = [m for m in self.messages if m.id != temp_id]

        mutation = OptimisticMutation(apply, restore)
        try:
            sent = await mutation.run(lambda: self._api.send_message(self.partner_id, content))
        except ApiError as exc:
            self.error = exc.message or "Failed to send message."
            return None

        self.messages = [sent if m.id == placeholder.id else m for m in self.messages]
        return sent
