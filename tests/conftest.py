import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from messenger.controller import MessengerController
from messenger.exceptions import StoreError
from messenger.store.base import Document
from messenger.store.in_memory import InMemoryDocumentStore


class FakeClock:
    """Strictly increasing timestamps, one second apart."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)) -> None:
        self.now = start
        self.readings: list[datetime] = []

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        self.readings.append(self.now)
        return self.now


class FaultyStore(InMemoryDocumentStore):
    """In-memory store whose n-th 'update_one' call (counting from the last reset) raises 'StoreError'."""

    def __init__(self) -> None:
        super().__init__()
        self.updates = 0
        self.fail_on_update: int | None = None

    def fail_next_updates_at(self, n: int) -> None:
        self.updates = 0
        self.fail_on_update = n

    async def update_one(
        self,
        collection: str,
        query: Document,
        push: Document | None = None,
        set_fields: Document | None = None,
    ) -> bool:
        self.updates += 1
        if self.fail_on_update is not None and self.updates == self.fail_on_update:
            raise StoreError(f"injected failure on update #{self.updates} of '{collection}'")
        return await super().update_one(collection, query, push=push, set_fields=set_fields)


class SlowStore(InMemoryDocumentStore):
    """In-memory store that sleeps before the selected kinds of calls."""

    def __init__(self, delay: float = 1.0) -> None:
        super().__init__()
        self.delay = delay
        self.slow_finds = False
        self.slow_updates = False

    async def find_one(self, collection: str, query: Document) -> Document | None:
        if self.slow_finds:
            await asyncio.sleep(self.delay)
        return await super().find_one(collection, query)

    async def update_one(
        self,
        collection: str,
        query: Document,
        push: Document | None = None,
        set_fields: Document | None = None,
    ) -> bool:
        if self.slow_updates:
            await asyncio.sleep(self.delay)
        return await super().update_one(collection, query, push=push, set_fields=set_fields)


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr("messenger.orchestrator.get_current_timestamp", fake)
    return fake


@pytest.fixture
def store() -> FaultyStore:
    return FaultyStore()


@pytest.fixture
def controller(store: FaultyStore, clock: FakeClock) -> MessengerController:
    return MessengerController(store)
