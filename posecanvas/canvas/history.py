from __future__ import annotations

from PIL import Image


class HistoryStack:
    """Snapshots of a raster layer, oldest first.

    The bottom entry is the seed written by the last reset and is never
    popped. Snapshots are copied on the way in and on the way out so the
    owner can keep drawing on its live layer.
    """

    def __init__(self, seed: Image.Image | None = None) -> None:
        self._entries: list[Image.Image] = []
        if seed is not None:
            self.seed(seed)

    def __len__(self) -> int:
        return len(self._entries)

    def seed(self, snapshot: Image.Image) -> None:
        self._entries = [snapshot.copy()]

    def push(self, snapshot: Image.Image) -> None:
        if not self._entries:
            raise RuntimeError("history has not been seeded")
        self._entries.append(snapshot.copy())

    @property
    def can_undo(self) -> bool:
        return len(self._entries) > 1

    @property
    def top(self) -> Image.Image:
        if not self._entries:
            raise RuntimeError("history has not been seeded")
        return self._entries[-1].copy()

    def undo(self) -> Image.Image | None:
        """Drop the newest snapshot and return the one now on top.

        Returns None without touching the stack when only the seed remains.
        """
        if not self.can_undo:
            return None
        self._entries.pop()
        return self.top
