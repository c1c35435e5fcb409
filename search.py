import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from letterset import LetterSet
from score_cache import cached_count_words
from trie import Trie


class BestRecord:
    """Best (score, string) seen by any worker.

    Every read and update goes through one lock. ``on_improve`` runs while the
    lock is held, so improvements are reported once each and in score order.
    """

    def __init__(self, score: int = 0, string: str = "", on_improve: Optional[Callable[[str, int], None]] = None):
        self._lock = threading.Lock()
        self._score = score
        self._string = string
        self._on_improve = on_improve

    def offer(self, candidate: str, score: int) -> bool:
        with self._lock:
            if score <= self._score:
                return False
            self._score = score
            self._string = candidate
            if self._on_improve is not None:
                self._on_improve(candidate, score)
            return True

    def snapshot(self):
        with self._lock:
            return self._score, self._string

    @property
    def score(self) -> int:
        return self.snapshot()[0]

    @property
    def string(self) -> str:
        return self.snapshot()[1]


@dataclass
class SearchStats:
    splits: int = 0
    candidates: int = 0
    improvements: int = 0

    def merge(self, other: "SearchStats") -> None:
        self.splits += other.splits
        self.candidates += other.candidates
        self.improvements += other.improvements


@dataclass
class SearchContext:
    """State shared by every level of one ``augment`` recursion."""

    trie: Trie
    record: BestRecord
    scorer: Callable[[str, Trie], int] = cached_count_words
    abort_on_missing_suffix: bool = True
    stop_event: Optional[threading.Event] = None
    deadline: Optional[float] = None
    max_depth: Optional[int] = None
    stats: SearchStats = field(default_factory=SearchStats)

    def should_stop(self) -> bool:
        if self.stop_event is not None and self.stop_event.is_set():
            return True
        if self.deadline is not None and time.time() >= self.deadline:
            if self.stop_event is not None:
                self.stop_event.set()
            return True
        return False


def augment(partial: str, ctx: SearchContext, depth: int = 0) -> None:
    """Grow ``partial`` by swapping its trailing fragment for longer words.

    For each split point, from the full string down to the empty prefix, the
    trailing fragment is looked up in the trie and every word below it whose
    letters avoid the prefix becomes a candidate ``prefix + word``. Better
    candidates are offered to the record; every candidate is grown again.
    If the fragment is not a trie path the remaining split points are skipped
    unless ``ctx.abort_on_missing_suffix`` is False.
    """
    if ctx.should_stop():
        return
    for i in range(len(partial), -1, -1):
        prefix, suffix = partial[:i], partial[i:]
        suffix_node = ctx.trie.walk(suffix)
        if suffix_node is None:
            if ctx.abort_on_missing_suffix:
                return
            continue
        ctx.stats.splits += 1

        terminals = []
        suffix_node.find_unconflicted_terminals(LetterSet.from_word(prefix), terminals.append)

        for node in terminals:
            extend(ctx, prefix, len(suffix), node.partial, depth)
            if ctx.should_stop():
                return


def extend(ctx: SearchContext, prefix: str, suffix_len: int, candidate_suffix: str, depth: int) -> None:
    """Score ``prefix + candidate_suffix`` and grow it if it is longer than before."""
    if len(candidate_suffix) <= suffix_len:
        return
    candidate = prefix + candidate_suffix
    ctx.stats.candidates += 1
    score = ctx.scorer(candidate, ctx.trie)
    if ctx.record.offer(candidate, score):
        ctx.stats.improvements += 1
    if ctx.max_depth is not None and depth + 1 > ctx.max_depth:
        return
    if ctx.should_stop():
        return
    augment(candidate, ctx, depth + 1)
