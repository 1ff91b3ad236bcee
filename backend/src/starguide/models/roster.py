"""User roster snapshot passed into every recommendation run."""

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class OwnershipStatus(str, Enum):
    OWNED = "owned"
    PLANNED = "planned"
    NONE = "none"


@dataclass(frozen=True)
class UserCharacterInvestment:
    """What the user has of one character.

    ``level`` is the eidolon level; negative input is tolerated and read as 0.
    """

    ownership: OwnershipStatus = OwnershipStatus.NONE
    level: int = 0
    signature_equipment: bool = False

    @property
    def effective_level(self) -> int:
        return max(0, self.level)

    @property
    def is_owned(self) -> bool:
        return self.ownership == OwnershipStatus.OWNED


@dataclass(frozen=True)
class RosterSnapshot:
    """Immutable mapping of character id to the user's investment."""

    entries: Mapping[str, UserCharacterInvestment] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Freeze a private copy so later mutation of the caller's dict has no effect
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @classmethod
    def from_owned(cls, owned_ids: list[str], levels: Optional[dict[str, int]] = None) -> "RosterSnapshot":
        """Build a snapshot where every listed id is owned."""
        levels = levels or {}
        return cls({
            char_id: UserCharacterInvestment(OwnershipStatus.OWNED, levels.get(char_id, 0))
            for char_id in owned_ids
        })

    @property
    def owned_ids(self) -> frozenset[str]:
        return frozenset(cid for cid, inv in self.entries.items() if inv.is_owned)

    @property
    def planned_ids(self) -> frozenset[str]:
        return frozenset(
            cid for cid, inv in self.entries.items()
            if inv.ownership == OwnershipStatus.PLANNED
        )

    def is_owned(self, character_id: str) -> bool:
        inv = self.entries.get(character_id)
        return inv is not None and inv.is_owned

    def investment(self, character_id: str) -> Optional[UserCharacterInvestment]:
        return self.entries.get(character_id)

    def level_of(self, character_id: str) -> int:
        inv = self.entries.get(character_id)
        return inv.effective_level if inv else 0

    def content_hash(self) -> str:
        """Stable hash of the roster content, independent of insertion order."""
        payload = [
            [cid, inv.ownership.value, inv.effective_level, inv.signature_equipment]
            for cid, inv in sorted(self.entries.items())
        ]
        return hashlib.sha256(json.dumps(payload).encode("utf-8")).hexdigest()[:16]
