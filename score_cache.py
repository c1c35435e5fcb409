import threading
from collections import OrderedDict

import utils

_actual_hits = 0
_actual_misses = 0
CACHE_DISABLED = False

# LRU cache using OrderedDict
MAX_CACHE_SIZE = 50000
class LRUCache(OrderedDict):
    def __init__(self, maxsize=MAX_CACHE_SIZE, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.maxsize = maxsize
    def __getitem__(self, key):
        value = super().__getitem__(key)
        self.move_to_end(key)
        return value
    def __setitem__(self, key, value):
        if key in self:
            self.move_to_end(key)
        super().__setitem__(key, value)
        if len(self) > self.maxsize:
            oldest = next(iter(self))
            del self[oldest]


# Guards the shared cache and the hit/miss counters
_CACHE_LOCK = threading.Lock()


def count_words(text, trie):
    """Count the dictionary words occurring in ``text``, overlaps included.

    From every offset the trie is walked forward one letter at a time and each
    terminal node reached adds one.
    """
    root = trie.root
    count = 0
    for i in range(len(text)):
        node = root
        for j in range(i, len(text)):
            node = node.walk(text[j])
            if node is None:
                break
            if node.terminal:
                count += 1
    return count


def cached_count_words(text, trie):
    """Compute or retrieve the score of ``text``.

    The default cache is shared by every worker thread of the process and keyed
    by the trie token as well as the text, so distinct tries never mix. When
    CACHE_DISABLED is True, always recomputes without touching cache counters.
    """
    global _actual_hits, _actual_misses

    if CACHE_DISABLED:
        return count_words(text, trie)

    key = (trie.token, text)
    with _CACHE_LOCK:
        cache = getattr(cached_count_words, "_cache", None)
        if cache is None:
            cache = LRUCache(MAX_CACHE_SIZE)
            cached_count_words._cache = cache
        if key in cache:
            _actual_hits += 1
            return cache[key]
        _actual_misses += 1

    val = count_words(text, trie)
    with _CACHE_LOCK:
        cache[key] = val
    return val


def reset_cache():
    global _actual_hits, _actual_misses
    with _CACHE_LOCK:
        cached_count_words._cache = None
        _actual_hits = 0
        _actual_misses = 0


def cache_stats():
    with _CACHE_LOCK:
        cache = getattr(cached_count_words, "_cache", None)
        return {"hits": _actual_hits, "misses": _actual_misses, "size": len(cache) if cache else 0}


def print_cache_summary():
    stats = cache_stats()
    utils.log_with_time(f"[CACHE SUMMARY] Cached scores: {stats['size']}")
    utils.log_with_time(f"[CACHE SUMMARY] Actual cache hits: {stats['hits']}")
    utils.log_with_time(f"[CACHE SUMMARY] Actual cache misses: {stats['misses']}")
