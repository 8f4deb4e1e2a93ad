"""
Bounded best-of-N ranking with pluggable selection rules.

A TopN keeps the N best (object, score) pairs seen so far, sorted by score
descending, and hands one (or several) of them back according to a selection
function. Selection functions only see the scores, best first, and return
positions into that list.

Single-choice functions have the signature ``f(scores, rng) -> int``;
multi-choice functions have the signature ``f(scores, num_items, rng) -> List[int]``.
``rng`` is any object exposing ``random()`` returning a float in [0, 1), such as
``numpy.random.Generator``.
"""

import math
from typing import Any, Callable, Generic, List, Sequence, Tuple, TypeVar

import numpy as np

ObjType = TypeVar("ObjType")

IndexChoiceFunction = Callable[[Sequence[float], Any], int]
MultipleIndicesChoiceFunction = Callable[[Sequence[float], int, Any], List[int]]


# ------------------------------------------------------------
# Single-choice functions
# ------------------------------------------------------------
def top_element(scores: Sequence[float], rng: Any = None) -> int:
    """Just choose the best element."""
    return 0


def random_element(scores: Sequence[float], rng: Any) -> int:
    """Choose uniformly among the retained elements."""
    return min(int(math.floor(len(scores) * rng.random())), len(scores) - 1)


def weighted_random_element(scores: Sequence[float], rng: Any) -> int:
    """
    Choose one of the retained elements with probability proportional to score.

    Args:
        scores: Non-negative scores, best first
        rng: Random source

    Returns:
        Position of the first element whose cumulative score reaches the drawn threshold

    Raises:
        ValueError: If any score is negative
    """
    if any(score < 0 for score in scores):
        raise ValueError("Weighted selection requires non-negative scores.")

    threshold = math.fsum(scores) * rng.random()
    idx = 0
    while idx < len(scores) - 1 and threshold > scores[idx]:
        threshold -= scores[idx]
        idx += 1
    return idx


# ------------------------------------------------------------
# Multi-choice functions
# ------------------------------------------------------------
def _check_num_items(scores: Sequence[float], num_items: int):
    if num_items < 0:
        raise ValueError(f"Cannot choose a negative number of items ({num_items}).")
    if num_items > len(scores):
        raise ValueError(f"Cannot choose {num_items} items out of {len(scores)}.")


def top_elements(scores: Sequence[float], num_items: int, rng: Any = None) -> List[int]:
    """Choose the best ``num_items`` elements."""
    _check_num_items(scores, num_items)
    return list(range(num_items))


def random_elements(scores: Sequence[float], num_items: int, rng: Any) -> List[int]:
    """
    Selection sampling: one pass, each subset of size ``num_items`` equally likely.

    Position i is kept when a fresh draw falls below
    (items still needed) / (positions left including i), which always yields
    exactly ``num_items`` positions in ascending order.
    """
    _check_num_items(scores, num_items)
    total_num_items = len(scores)
    chosen: List[int] = []
    for idx in range(total_num_items):
        needed = num_items - len(chosen)
        if needed == 0:
            break
        if rng.random() < needed / (total_num_items - idx):
            chosen.append(idx)
    return chosen


def weighted_random_elements(scores: Sequence[float], num_items: int, rng: Any) -> List[int]:
    """
    Draw ``num_items`` distinct positions, each draw weighted by score.

    Repeats weighted single draws, rejecting positions already chosen.

    Raises:
        ValueError: If fewer than ``num_items`` positions have a positive score,
            in which case rejection sampling could never finish
    """
    _check_num_items(scores, num_items)
    positive = sum(1 for score in scores if score > 0)
    if num_items > positive:
        raise ValueError(
            f"Cannot draw {num_items} distinct weighted items when only {positive} have positive weight."
        )

    chosen: List[int] = []
    while len(chosen) < num_items:
        new_item = weighted_random_element(scores, rng)
        if new_item not in chosen and scores[new_item] > 0:
            chosen.append(new_item)
    return chosen


class TopN(Generic[ObjType]):
    """
    Keep the top N of something by score, then select one or more of them.

    Entries stay sorted by score descending. By default selection takes the
    best entry and multi-selection the best k entries.
    """

    def __init__(self, size: int,
                 selection_function: IndexChoiceFunction = top_element,
                 multi_select_function: MultipleIndicesChoiceFunction = top_elements,
                 rng: Any = None):
        """
        Args:
            size: Maximum number of entries retained
            selection_function: Rule used by select()
            multi_select_function: Rule used by multi_select()
            rng: Random source handed to the selection rules; defaults to a fresh
                numpy Generator
        """
        if size < 1:
            raise ValueError(f"TopN size must be at least 1, got {size}.")
        self.size = size
        self.selection_function = selection_function
        self.multi_select_function = multi_select_function
        self.rng = rng if rng is not None else np.random.default_rng()
        self._entries: List[Tuple[ObjType, float]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def insert(self, obj: ObjType, score: float):
        """
        Offer an object; it is kept only if it ranks within the top N.

        The new entry goes after every entry with a strictly greater score,
        so it lands ahead of entries with an equal score.
        """
        ranking = -1
        for idx, (_, value) in enumerate(self._entries):
            if value > score:
                ranking = idx

        if ranking < self.size - 1:
            self._entries.insert(ranking + 1, (obj, score))
            del self._entries[self.size:]

    def scores(self) -> List[float]:
        return [value for _, value in self._entries]

    def objects(self) -> List[ObjType]:
        return [obj for obj, _ in self._entries]

    def select(self) -> ObjType:
        """
        Pick one retained object with the selection function.

        Raises:
            ValueError: If nothing has been inserted
        """
        if not self._entries:
            raise ValueError("Cannot select from an empty TopN.")
        idx = self.selection_function(self.scores(), self.rng)
        return self._entries[idx][0]

    def multi_select(self, num_items: int) -> List[ObjType]:
        """
        Pick several distinct retained objects with the multi-selection function.

        Raises:
            ValueError: If nothing has been inserted
        """
        if not self._entries:
            raise ValueError("Cannot select from an empty TopN.")
        indices = self.multi_select_function(self.scores(), num_items, self.rng)
        return [self._entries[idx][0] for idx in indices]

    def get_ranked_object(self, rank: int) -> ObjType:
        return self._entries[rank][0]
