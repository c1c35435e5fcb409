import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import random
import threading
import time

import pytest

import search
from score_cache import count_words
from search import BestRecord, SearchContext, augment
from trie import Trie

TOY_WORDS = ["a", "at", "ta", "cat", "tab"]


def make_ctx(words, **kwargs):
    trie = Trie.build(words)
    reported = []
    record = BestRecord(on_improve=lambda c, s: reported.append((c, s)))
    ctx = SearchContext(trie, record, scorer=count_words, **kwargs)
    return ctx, reported


def test_toy_dictionary_seed_cat_finds_nothing():
    ctx, reported = make_ctx(TOY_WORDS)
    augment("cat", ctx)
    assert reported == []
    assert ctx.record.snapshot() == (0, "")


def test_toy_dictionary_seed_ta_grows_to_tab():
    ctx, reported = make_ctx(TOY_WORDS)
    augment("ta", ctx)
    assert reported == [("tab", 3)]
    assert ctx.record.snapshot() == (3, "tab")
    assert ctx.stats.candidates == 1
    assert ctx.stats.improvements == 1


def test_appends_disjoint_word_at_empty_suffix():
    ctx, reported = make_ctx(["ab", "cd", "ce"])
    augment("ab", ctx)
    assert reported == [("abcd", 2)]
    assert ctx.record.string == "abcd"


def test_missing_suffix_aborts_remaining_splits():
    ctx, reported = make_ctx(["abc", "abcd"])
    augment("abc", ctx)
    assert reported == []
    assert ctx.record.snapshot() == (0, "")


def test_missing_suffix_skipped_when_exhaustive():
    ctx, reported = make_ctx(["abc", "abcd"], abort_on_missing_suffix=False)
    augment("abc", ctx)
    assert reported == [("abcd", 2)]


def test_growth_is_monotonic_and_monoglyphic(monkeypatch):
    words = ["ab", "abc", "c", "cd", "de", "e", "fox", "ox", "box"]
    ctx, _ = make_ctx(words, abort_on_missing_suffix=False)
    calls = []
    stack = []
    original = search.augment

    def tracking(partial, ctx, depth=0):
        if stack:
            calls.append((stack[-1], partial))
        stack.append(partial)
        try:
            original(partial, ctx, depth)
        finally:
            stack.pop()

    monkeypatch.setattr(search, "augment", tracking)
    tracking("ab", ctx)
    assert calls
    for parent, child in calls:
        assert len(child) > len(parent)
        assert len(set(child)) == len(child)


def test_every_scored_candidate_is_monoglyphic():
    scored = []

    def scorer(text, trie):
        scored.append(text)
        return count_words(text, trie)

    ctx, _ = make_ctx(["ab", "abc", "c", "cd", "de", "e", "fox", "ox", "box"], abort_on_missing_suffix=False)
    ctx.scorer = scorer
    augment("ab", ctx)
    assert scored
    for text in scored:
        assert len(set(text)) == len(text)


def test_search_is_deterministic():
    words = ["ab", "abc", "c", "cd", "de", "e", "fox", "ox", "box"]
    first, first_reported = make_ctx(words)
    second, second_reported = make_ctx(words)
    augment("ab", first)
    augment("ab", second)
    assert first_reported == second_reported
    assert first.stats == second.stats


def test_max_depth_zero_scores_without_recursing():
    ctx, reported = make_ctx(["ab", "c", "cd"], max_depth=0)
    augment("ab", ctx)
    # "abc" and "abcd" both come from the first level
    assert ctx.stats.candidates == 2
    assert reported[-1] == ("abcd", 3)


def test_stop_event_prevents_search():
    stop = threading.Event()
    stop.set()
    ctx, reported = make_ctx(TOY_WORDS, stop_event=stop)
    augment("ta", ctx)
    assert reported == []
    assert ctx.stats.splits == 0


def test_past_deadline_sets_stop_event():
    stop = threading.Event()
    ctx, reported = make_ctx(TOY_WORDS, stop_event=stop, deadline=time.time() - 1)
    augment("ta", ctx)
    assert reported == []
    assert stop.is_set()


def test_best_record_only_improves():
    seen = []
    record = BestRecord(on_improve=lambda c, s: seen.append((c, s)))
    assert record.offer("ab", 2)
    assert not record.offer("cd", 2)
    assert not record.offer("e", 1)
    assert record.offer("abc", 5)
    assert record.snapshot() == (5, "abc")
    assert seen == [("ab", 2), ("abc", 5)]


def test_best_record_floor():
    record = BestRecord(4)
    assert not record.offer("abc", 4)
    assert record.offer("abcd", 5)


def test_best_record_concurrent_offers():
    seen = []
    record = BestRecord(on_improve=lambda c, s: seen.append(s))
    scores = list(range(1, 2001))
    random.Random(7).shuffle(scores)
    chunks = [scores[i::8] for i in range(8)]

    def offer_all(chunk):
        for s in chunk:
            record.offer(f"w{s}", s)

    threads = [threading.Thread(target=offer_all, args=(c,)) for c in chunks]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert record.snapshot() == (2000, "w2000")
    assert seen == sorted(set(seen))
    assert seen[-1] == 2000
