# randomness.py
# A serializable pseudo-random stream for the game engine.
#
# The whole generator state is one unsigned 32-bit integer, so a client can hold
# it alongside the board and hand it back on the next request.

import time

_MASK = 0xFFFFFFFF
_MULTIPLIER = 1103515245
_INCREMENT = 12345


def _step(state: int) -> int:
    return (state * _MULTIPLIER + _INCREMENT) & _MASK


def seed_from_clock() -> int:
    """Returns the current Unix time truncated to 32 bits."""
    return int(time.time()) & _MASK


class RandRStream:
    """
    The reentrant rand_r generator from the GNU C library.

    Each call to rand_r() advances the state three times and stitches
    11 + 10 + 10 bits of output into a value in [0, 2**31).
    """

    def __init__(self, seed: int):
        self.seed = seed & _MASK

    def rand_r(self) -> int:
        state = _step(self.seed)
        result = (state >> 16) % 2048
        state = _step(state)
        result = (result << 10) ^ ((state >> 16) % 1024)
        state = _step(state)
        result = (result << 10) ^ ((state >> 16) % 1024)
        self.seed = state
        return result

    def randrange(self, n: int) -> int:
        """Draws an integer in [0, n) as rand_r() % n."""
        if n <= 0:
            raise ValueError(f"randrange() needs a positive bound, got {n}.")
        return self.rand_r() % n

    def __repr__(self) -> str:
        return f"RandRStream(seed={self.seed})"
