from dataclasses import dataclass, fields
from typing import Dict, Literal, Mapping, Tuple

StatKey = Literal["health", "power", "intelligence", "agility", "luck"]

STAT_KEYS: Tuple[str, ...] = ("health", "power", "intelligence", "agility", "luck")


@dataclass
class BonusStats:
    # All start at 0; level-ups push them up. Gear is tracked separately.
    health: int = 0
    power: int = 0
    intelligence: int = 0
    agility: int = 0
    luck: int = 0

    def get(self, key: str) -> int:
        if key not in STAT_KEYS:
            raise KeyError(f"Unknown stat: {key}")
        return getattr(self, key)

    def plus(self, deltas: Mapping[str, int]) -> "BonusStats":
        """Return a new BonusStats with partial deltas added (unknown keys are ignored)."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in deltas.items():
            if key in values:
                values[key] += int(value)
        return BonusStats(**values)

    def to_dict(self) -> Dict[str, int]:
        return {key: getattr(self, key) for key in STAT_KEYS}

    @classmethod
    def from_dict(cls, data: Mapping[str, int]) -> "BonusStats":
        return cls(**{key: int(data.get(key, 0)) for key in STAT_KEYS})
