"""RNG utilities for card shuffling."""

import hashlib
import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def seeded_random(seed: str, salt: str = "") -> random.Random:
    """Create a deterministic random.Random instance from seed and optional salt.

    Args:
        seed: Base seed string
        salt: Optional salt to modify the seed (e.g., a session id)

    Returns:
        random.Random instance that will produce deterministic sequences
    """
    combined = f"{seed}{salt}"
    hash_obj = hashlib.sha256(combined.encode('utf-8'))
    int_seed = int(hash_obj.hexdigest(), 16)

    # Mask to fit within Python's random seed range
    int_seed = int_seed & ((1 << 31) - 1)

    return random.Random(int_seed)


def fisher_yates_shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of items.

    Walks from the last index down to 1 and swaps each element with a
    uniformly chosen element at an index <= its own.
    """
    rng = rng or random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def shuffle_deck(deck_ids: List[str], seed: str, salt: str = "") -> List[str]:
    """Shuffle a deck of card names deterministically."""
    return fisher_yates_shuffle(deck_ids, seeded_random(seed, salt))
