"""
Tagged per-field values for partial updates.

Every optional field of an update payload ends up as exactly one of:

* ``ABSENT``     - the key was not in the payload, leave the column alone
* ``CLEAR``      - the key was sent as null, set the column to NULL
* ``Set(value)`` - the key carried a validated value
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar, Union

T = TypeVar("T")


class _Absent:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False


class _Clear:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "CLEAR"


ABSENT = _Absent()
CLEAR = _Clear()


@dataclass(frozen=True)
class Set(Generic[T]):
    value: T


FieldChange = Union[_Absent, _Clear, Set]


@dataclass(frozen=True)
class GeoTrackingPatch:
    """Validated partial update: record id plus a change for every updatable column."""
    record_id: int
    changes: Dict[str, FieldChange]

    def get(self, column: str) -> FieldChange:
        return self.changes.get(column, ABSENT)

    @property
    def touched(self) -> Dict[str, Any]:
        """Columns that will change, with ``None`` standing for a cleared column."""
        return {
            column: (None if change is CLEAR else change.value)
            for column, change in self.changes.items()
            if change is not ABSENT
        }
