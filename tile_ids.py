# file: tile_ids.py


class TileIdError(ValueError):
    pass


class TileIdAllocator:
    """
    Issues tile ids for one game session.
    Ids are strictly increasing and never reissued; retired ids are
    remembered so the grid can check that no dead tile is still on the board.
    """

    def __init__(self, start: int = 1):
        self._start = start
        self._next = start
        self._retired = set()

    @property
    def last_issued(self):
        """Most recently issued id, or None if nothing was issued since reset."""
        if self._next == self._start:
            return None
        return self._next - 1

    def next_id(self) -> int:
        tile_id = self._next
        self._next += 1
        return tile_id

    def retire(self, tile_id: int) -> None:
        if not self._start <= tile_id < self._next:
            raise TileIdError(f"Tile id {tile_id} was never issued")
        if tile_id in self._retired:
            raise TileIdError(f"Tile id {tile_id} is already retired")
        self._retired.add(tile_id)

    def is_live(self, tile_id: int) -> bool:
        return self._start <= tile_id < self._next and tile_id not in self._retired

    def reset(self) -> None:
        # New game only: a fresh session may start numbering again
        self._next = self._start
        self._retired.clear()
