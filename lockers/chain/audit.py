"""
Append-only audit log.

Every state-changing locker operation appends one or more events. Events
are hash-linked the same way blocks in a local chain are: each one records
the hash of its predecessor, so the log can be verified after the fact.
The protocol writes to the log but never reads from it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .primitives import GENESIS_HASH, hash_data


@dataclass
class AuditEvent:
    """A single structured audit event."""
    sequence: int
    name: str
    height: int
    locker_id: Optional[int]
    fields: Dict[str, Any]
    previous_hash: str
    event_hash: str = ""

    def __post_init__(self):
        if not self.event_hash:
            self.event_hash = self.compute_hash()

    def compute_hash(self) -> str:
        """Compute the hash of this event."""
        data = {
            "sequence": self.sequence,
            "name": self.name,
            "height": self.height,
            "locker_id": self.locker_id,
            "fields": self.fields,
            "previous_hash": self.previous_hash,
        }
        return hash_data(data)

    def to_dict(self) -> dict:
        return {
            "sequence": self.sequence,
            "name": self.name,
            "height": self.height,
            "locker_id": self.locker_id,
            "fields": self.fields,
            "previous_hash": self.previous_hash,
            "event_hash": self.event_hash,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AuditEvent':
        return cls(
            sequence=data["sequence"],
            name=data["name"],
            height=data["height"],
            locker_id=data["locker_id"],
            fields=data["fields"],
            previous_hash=data["previous_hash"],
            event_hash=data["event_hash"],
        )


@dataclass
class AuditLog:
    """The audit event sink."""
    events: List[AuditEvent] = field(default_factory=list)

    @property
    def head_hash(self) -> str:
        if not self.events:
            return GENESIS_HASH
        return self.events[-1].event_hash

    def append(self, name: str, height: int, locker_id: Optional[int] = None, **fields) -> AuditEvent:
        """Append a new event to the log."""
        event = AuditEvent(
            sequence=len(self.events),
            name=name,
            height=height,
            locker_id=locker_id,
            fields=fields,
            previous_hash=self.head_hash,
        )
        self.events.append(event)
        return event

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[AuditEvent]:
        return iter(self.events)

    def by_name(self, name: str) -> List[AuditEvent]:
        return [e for e in self.events if e.name == name]

    def for_locker(self, locker_id: int) -> List[AuditEvent]:
        return [e for e in self.events if e.locker_id == locker_id]

    def verify(self) -> bool:
        """Verify the log's hash links and sequence numbers."""
        previous = GENESIS_HASH
        for i, event in enumerate(self.events):
            if event.sequence != i:
                return False
            if event.previous_hash != previous:
                return False
            if event.event_hash != event.compute_hash():
                return False
            previous = event.event_hash
        return True
