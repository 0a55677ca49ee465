import logging
from typing import Optional, Sequence

from .models import SyncFragment

logger = logging.getLogger(__name__)

def find_fragment_index(fragments: Sequence[SyncFragment], position: int) -> Optional[int]:
    """
    Binary search for the fragment whose [begin, end] contains `position`.

    Fragments must be sorted by `begin` and must not overlap. When two
    neighbours share a boundary point (a.end == b.begin == position) the lower
    index wins. Returns None for positions before the first fragment, after
    the last one, or inside a gap.
    """
    left = 0
    right = len(fragments) - 1
    found = None

    while left <= right:
        mid = (left + right) // 2
        fragment = fragments[mid]

        if position < fragment.begin:
            right = mid - 1
        elif position > fragment.end:
            left = mid + 1
        else:
            # Keep narrowing left so a shared boundary resolves to the earlier fragment
            found = mid
            right = mid - 1

    return found

def resolve(global_offset: int, fragments: Sequence[SyncFragment], previous_index: Optional[int]) -> Optional[int]:
    """
    Returns the fragment index for `global_offset`, reusing `previous_index`
    when that fragment still contains the offset. Gives the same answer as
    `find_fragment_index`, including on shared boundaries.
    """
    if previous_index is not None and 0 <= previous_index < len(fragments):
        fragment = fragments[previous_index]
        if fragment.contains(global_offset):
            # On its begin point the previous fragment may also match; lower index wins
            shared = (global_offset == fragment.begin and previous_index > 0
                      and fragments[previous_index - 1].end >= global_offset)
            if not shared:
                return previous_index

    return find_fragment_index(fragments, global_offset)

class PositionResolver:
    """Tracks the fragment matching the most recent global offset."""

    def __init__(self):
        self.last_global_offset: Optional[int] = None
        self.current_fragment_index: Optional[int] = None

    def update(self, global_offset: int, fragments: Sequence[SyncFragment]) -> Optional[int]:
        previous = self.current_fragment_index
        self.last_global_offset = global_offset
        self.current_fragment_index = resolve(global_offset, fragments, previous)

        if self.current_fragment_index != previous:
            logger.debug(f"Fragment: {previous} -> {self.current_fragment_index} at {global_offset}ms")
        return self.current_fragment_index

    def reset(self):
        self.last_global_offset = None
        self.current_fragment_index = None
