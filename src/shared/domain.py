"""Domain building blocks: events and the aggregate root mixin."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class DomainEvent(BaseModel):
    """Immutable record of something that happened to an aggregate."""

    model_config = ConfigDict(frozen=True)

    __version__: ClassVar[str] = "v1"

    @property
    def event_name(self) -> str:
        return type(self).__name__

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class AggregateRoot:
    """Mixin for ORM-mapped aggregates that raise domain events.

    Events accumulate in ``_events`` until the session that persisted the
    aggregate commits and the database publishes them.
    """

    @property
    def _events(self) -> list[DomainEvent]:
        return vars(self).setdefault("_pending_events", [])

    def raise_(self, event: DomainEvent) -> None:
        self._events.append(event)
