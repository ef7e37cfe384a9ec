"""Translation of logical addresses through a segment table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .registers import register_size

log = logging.getLogger(__name__)


@dataclass
class Segment:
    """A memory segment: its base address and the address where it ends."""

    base: int
    limit: int


def _c_divmod(value: int, divisor: int) -> tuple[int, int]:
    quotient = abs(value) // abs(divisor)
    if (value < 0) != (divisor < 0):
        quotient = -quotient
    return quotient, value - quotient * divisor


@dataclass
class Mmu:
    """Segment-based memory management unit."""

    max_segment_size: int
    segments: list[Segment] = field(default_factory=list)

    def segment_number(self, logical_address: int) -> int:
        """Return the segment that the logical address falls in."""
        return _c_divmod(logical_address, self.max_segment_size)[0]

    def segment_offset(self, logical_address: int) -> int:
        """Return the offset of the logical address within its segment."""
        return _c_divmod(logical_address, self.max_segment_size)[1]

    def _segment(self, logical_address: int) -> Segment:
        number = self.segment_number(logical_address)
        if not 0 <= number < len(self.segments):
            raise IndexError(f"no segment {number} in the segment table")
        return self.segments[number]

    def is_access_valid(self, register: str, logical_address: int) -> bool:
        """Tell whether reading or writing ``register`` at the address stays in its segment."""
        end = self.segment_offset(logical_address) + register_size(register)
        segment = self._segment(logical_address)
        return segment.base + end <= segment.limit

    def physical_address(self, logical_address: int) -> int:
        """Translate a logical address into a physical one."""
        segment = self._segment(logical_address)
        offset = self.segment_offset(logical_address)
        physical = segment.base + offset
        log.debug("base: %#x + offset: %d = %#x", segment.base, offset, physical)
        return physical