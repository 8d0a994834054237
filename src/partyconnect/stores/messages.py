"""
Conversation message store.

Each conversation is a JSON list of messages under its own storage key:
- `event_{eventId}_user_{userId}_messages` for a conversation about an event
- `user_{userId}_messages` for a direct conversation

`userId` is the conversation partner. Message ids are `{userId}-{ms}`, unique within a
conversation. A message is unread until the reader (anyone but its sender) marks the
conversation read.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone

from pydantic import TypeAdapter, ValidationError

from partyconnect.core.storage import JsonSlot, KeyValueStorage
from partyconnect.core.time import millis_id
from partyconnect.domain.models import ConversationSummary, Event, Message
from partyconnect.stores.events import EventStore

logger = logging.getLogger(__name__)

_MESSAGES_ADAPTER = TypeAdapter(list[Message])
_EVENT_KEY = re.compile(r"^event_(?P<event>.+)_user_(?P<user>.+)_messages$")
_USER_KEY = re.compile(r"^user_(?P<user>.+)_messages$")


def conversation_key(user_id: str, event_id: str | None = None) -> str:
    if event_id:
        return f"event_{event_id}_user_{user_id}_messages"
    return f"user_{user_id}_messages"


def parse_conversation_key(key: str) -> tuple[str, str | None] | None:
    """Return `(user_id, event_id)` for a conversation key, None for other keys."""
    m = _EVENT_KEY.match(key)
    if m:
        return m.group("user"), m.group("event")
    m = _USER_KEY.match(key)
    if m:
        return m.group("user"), None
    return None


def _is_unread(message: Message, reader_id: str) -> bool:
    return not message.is_read and message.sender_id != reader_id


def _partner(event: Event | None, user_id: str) -> tuple[str, str] | None:
    """Name and avatar of `user_id` as recorded on the event (creator first, then contributors)."""
    if event is None:
        return None
    if event.creator.id == user_id:
        return event.creator.name, event.creator.avatar
    for c in event.contributors:
        if c.user_id == user_id or c.id == user_id:
            return c.name, c.avatar
    return None


class MessageStore:
    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    def _read(self, key: str) -> list[Message]:
        raw = JsonSlot(self._storage, key).load()
        if not isinstance(raw, list):
            return []
        try:
            return _MESSAGES_ADAPTER.validate_python(raw)
        except ValidationError as e:
            logger.warning("Ignoring unreadable conversation %s: %s", key, e)
            return []

    def _write(self, key: str, messages: list[Message]) -> bool:
        return JsonSlot(self._storage, key).save([m.model_dump(mode="json", by_alias=True) for m in messages])

    def _conversation_keys(self) -> list[tuple[str, str, str | None]]:
        out = []
        for key in self._storage.keys():
            parsed = parse_conversation_key(key)
            if parsed is not None:
                out.append((key, *parsed))
        return out

    def get_messages(self, user_id: str, event_id: str | None = None) -> list[Message]:
        return self._read(conversation_key(user_id, event_id))

    def send_message(
        self,
        user_id: str,
        *,
        sender_id: str,
        sender_name: str,
        text: str,
        event_id: str | None = None,
        now: datetime | None = None,
    ) -> Message | None:
        """Append a message to the conversation; blank text is ignored."""
        text = (text or "").strip()
        if not text:
            return None
        key = conversation_key(user_id, event_id)
        messages = self._read(key)
        taken = {m.id for m in messages}

        ts = now or datetime.now(tz=timezone.utc)
        message_id = millis_id(user_id, ts)
        while message_id in taken:
            ts += timedelta(milliseconds=1)
            message_id = millis_id(user_id, ts)

        message = Message(id=message_id, sender_id=sender_id, sender_name=sender_name, text=text, timestamp=ts)
        self._write(key, [*messages, message])
        return message

    def mark_read(self, user_id: str, event_id: str | None = None, *, reader_id: str) -> int:
        """Mark every message not sent by `reader_id` as read; returns how many changed."""
        key = conversation_key(user_id, event_id)
        messages = self._read(key)
        changed = 0
        updated: list[Message] = []
        for m in messages:
            if _is_unread(m, reader_id):
                m = m.model_copy(update={"is_read": True})
                changed += 1
            updated.append(m)
        if changed:
            self._write(key, updated)
        return changed

    def unread_count(self, reader_id: str) -> int:
        """Unread messages for `reader_id` across every conversation."""
        return sum(
            1 for key, _, _ in self._conversation_keys() for m in self._read(key) if _is_unread(m, reader_id)
        )

    def list_conversations(
        self, *, events: EventStore | None = None, reader_id: str | None = None
    ) -> list[ConversationSummary]:
        """One summary per non-empty conversation, most recent activity first.

        With `events`, the partner's name and avatar are taken from the conversation's
        event. With `reader_id`, each summary carries that reader's unread count.
        """
        out: list[ConversationSummary] = []
        for key, user_id, event_id in self._conversation_keys():
            messages = self._read(key)
            if not messages:
                continue
            summary = ConversationSummary(
                key=key,
                user_id=user_id,
                event_id=event_id,
                message_count=len(messages),
                last_message=messages[-1],
            )
            event = events.get_event(event_id) if events is not None and event_id else None
            partner = _partner(event, user_id)
            if partner is not None:
                name, avatar = partner
                summary.partner_name = name or summary.partner_name
                summary.partner_avatar = avatar or summary.partner_avatar
            if reader_id is not None:
                summary.unread_count = sum(1 for m in messages if _is_unread(m, reader_id))
            out.append(summary)
        out.sort(key=lambda s: s.last_message.timestamp.timestamp(), reverse=True)
        return out
