import random
import threading
from typing import Optional

from guessnumber.models import MIN_PICK, MAX_PICK


class DrawSource:
    """Uniform winning number in [MIN_PICK, MAX_PICK].

    Every instance owns its own generator so concurrently running engines
    never share state.
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def draw(self) -> int:
        with self._lock:
            return self._rng.randint(MIN_PICK, MAX_PICK)
