"""Event sinks for committed vault events."""

from typing import List, Protocol, Type, TypeVar

from pydantic import BaseModel

from user_vault.core.domain.events import VaultEvent

E = TypeVar("E", bound=BaseModel)


class EventSink(Protocol):
    def emit(self, event: VaultEvent) -> None:
        ...


class EventLog:
    """In-memory sink; keeps events in emission order."""

    def __init__(self) -> None:
        self._events: List[VaultEvent] = []

    def emit(self, event: VaultEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> List[VaultEvent]:
        return list(self._events)

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
