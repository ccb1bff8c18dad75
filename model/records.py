"""Scan result records."""

from dataclasses import dataclass
from typing import Any, Dict

from .objects import MAX_INT64


@dataclass(frozen=True)
class ConstantRecord:
    """One named constant of the requested type.

    The value is stored as a 64-bit pattern. ``signed`` says whether to
    interpret it as int64 or uint64, which only matters when ordering or
    doing arithmetic; most of the time ``literal`` is all that is needed.
    """

    name: str
    value: int  # Unsigned 64-bit bit pattern.
    signed: bool
    literal: str

    @property
    def int_value(self) -> int:
        """The value as a Python int, honouring signedness."""
        if self.signed and self.value > MAX_INT64:
            return self.value - (1 << 64)
        return self.value

    def sort_key(self) -> int:
        """Key for value order.

        Equal values tie, so a stable sort keeps them in declaration order.
        """
        return self.int_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.int_value,
            "signed": self.signed,
            "literal": self.literal,
        }

    def __str__(self) -> str:
        return self.literal
