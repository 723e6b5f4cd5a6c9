"""Least-recently-used frame replacement policy for the buffer pool."""

from __future__ import annotations

from collections import OrderedDict


class LRUReplacer:
    """Tracks unpinned frames and picks the least recently unpinned one as victim."""

    def __init__(self, num_pages: int) -> None:
        self._capacity = num_pages
        # Oldest entries first; newly unpinned frames go to the end.
        self._frames: OrderedDict[int, None] = OrderedDict()

    def victim(self) -> int | None:
        """Remove and return the least recently used frame, or None if there is none."""
        if not self._frames:
            return None
        frame_id, _ = self._frames.popitem(last=False)
        return frame_id

    def pin(self, frame_id: int) -> None:
        """Stop tracking a frame so it cannot be chosen as a victim."""
        self._frames.pop(frame_id, None)

    def unpin(self, frame_id: int) -> None:
        """Start tracking a frame; a frame already tracked keeps its position."""
        if len(self._frames) >= self._capacity or frame_id in self._frames:
            return
        self._frames[frame_id] = None

    def __len__(self) -> int:
        return len(self._frames)