"""
Height clock: the monotonic logical clock every timing guard reads.
"""


class HeightClock:
    """Tracks the current height. Advanced externally, never rewound."""

    def __init__(self, start_height: int = 0):
        if start_height < 0:
            raise ValueError(f"Height cannot be negative: {start_height}")
        self._height = start_height

    @property
    def current(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        """Advance the clock by a number of heights."""
        if blocks < 0:
            raise ValueError(f"Cannot go backwards in height: {blocks}")
        self._height += blocks
        return self._height

    def advance_to(self, height: int) -> int:
        """Advance clock to the specified height."""
        if height < self._height:
            raise ValueError(f"Cannot go backwards in height: {height} < {self._height}")
        self._height = height
        return self._height

    def elapsed_since(self, past_height: int) -> int:
        """Return heights elapsed since a past height."""
        return self._height - past_height
