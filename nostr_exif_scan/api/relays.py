"""Relay client: collects a user's notes from several Nostr relays.

One REQ subscription is opened per relay and all run concurrently. The fetch
phase has a single overall deadline; whatever arrived before it elapses is the
result. Relays that fail or stay silent are left out without failing the run.
"""

import asyncio
import json
import uuid
from dataclasses import dataclass, field
from typing import Optional

import websockets

from ..core.models import PostRecord

DEFAULT_TIMEOUT = 30.0
TEXT_NOTE_KIND = 1


@dataclass(frozen=True)
class PostFilter:
    """Subscription filter (NIP-01) for one author."""

    kinds: tuple[int, ...] = (TEXT_NOTE_KIND,)
    limit: int = 10000
    since: Optional[int] = None  # unix seconds
    until: Optional[int] = None

    def to_dict(self, author: str) -> dict:
        data = {
            "kinds": list(self.kinds),
            "authors": [author],
            "limit": self.limit,
        }
        if self.since is not None:
            data["since"] = self.since
        if self.until is not None:
            data["until"] = self.until
        return data


@dataclass
class PostCollector:
    """Events gathered so far, keyed by id."""

    author: str
    post_filter: PostFilter
    events: dict[str, PostRecord] = field(default_factory=dict)

    def accept(self, event: dict) -> bool:
        if not isinstance(event, dict) or "id" not in event:
            return False
        if event.get("pubkey") != self.author:
            return False
        if event.get("kind") not in self.post_filter.kinds:
            return False
        try:
            created_at = int(event.get("created_at", 0))
        except (TypeError, ValueError):
            return False
        if self.post_filter.since is not None and created_at < self.post_filter.since:
            return False
        if self.post_filter.until is not None and created_at > self.post_filter.until:
            return False
        if event["id"] not in self.events:
            self.events[event["id"]] = PostRecord.from_event(event)
        return True

    def records(self) -> list[PostRecord]:
        """Oldest first, keeping only the newest `limit` records."""
        ordered = sorted(self.events.values(), key=lambda p: (p.created_at, p.id))
        limit = self.post_filter.limit
        if limit and len(ordered) > limit:
            ordered = ordered[-limit:]
        return ordered


class RelayClient:
    """Fetches notes for an author from a list of relay URLs."""

    def __init__(self, relays: list[str], timeout: float = DEFAULT_TIMEOUT):
        """Initialize the relay client.

        Args:
            relays: Relay websocket URLs (wss://...)
            timeout: Overall seconds allowed for the whole fetch phase
        """
        self.relays = list(relays)
        self.timeout = timeout
        self.failed_relays: dict[str, str] = {}  # url -> error

    def fetch_posts(self, author: str, post_filter: Optional[PostFilter] = None) -> list[PostRecord]:
        """Collect notes by author from every relay.

        Args:
            author: Hex public key
            post_filter: Kinds, limit and time window (defaults to text notes)

        Returns:
            De-duplicated posts, oldest first. Empty if nothing was found.
        """
        collector = PostCollector(author=author, post_filter=post_filter or PostFilter())
        self.failed_relays = {}
        asyncio.run(self._collect(collector))
        return collector.records()

    async def _collect(self, collector: PostCollector) -> None:
        if not self.relays:
            return
        tasks = {
            asyncio.ensure_future(self._query_relay(url, collector)): url
            for url in self.relays
        }
        done, pending = await asyncio.wait(tasks, timeout=self.timeout)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            exc = task.exception()
            if exc is not None:
                self.failed_relays[tasks[task]] = str(exc) or type(exc).__name__

    async def _query_relay(self, url: str, collector: PostCollector) -> None:
        sub_id = uuid.uuid4().hex[:16]
        request = json.dumps(["REQ", sub_id, collector.post_filter.to_dict(collector.author)])

        async with websockets.connect(url, open_timeout=self.timeout, max_size=None) as ws:
            await ws.send(request)
            async for raw in ws:
                if handle_message(raw, sub_id, collector):
                    break
            await _close_subscription(ws, sub_id)


async def _close_subscription(ws, sub_id: str) -> None:
    try:
        await ws.send(json.dumps(["CLOSE", sub_id]))
    except websockets.exceptions.ConnectionClosed:
        pass


def handle_message(raw, sub_id: str, collector: PostCollector) -> bool:
    """Apply one relay message to the collector.

    Returns:
        True once the relay has finished sending stored events (EOSE) or
        closed the subscription
    """
    try:
        message = json.loads(raw)
    except (TypeError, ValueError):
        return False
    if not isinstance(message, list) or len(message) < 2:
        return False

    kind = message[0]
    if kind == "EVENT" and len(message) >= 3 and message[1] == sub_id:
        collector.accept(message[2])
    elif kind in ("EOSE", "CLOSED") and message[1] == sub_id:
        return True
    return False
