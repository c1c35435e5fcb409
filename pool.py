import concurrent.futures
import multiprocessing
import os
import queue
import threading
import time
from dataclasses import dataclass, field

from colorama import Fore

import score_cache
from score_cache import count_words
from search import BestRecord, SearchContext, SearchStats, augment
from trie import Trie
from utils import log_with_time, vlog


@dataclass
class PoolResult:
    score: int
    string: str
    seeds_total: int
    seeds_completed: int
    elapsed: float
    stopped: bool
    stats: SearchStats = field(default_factory=SearchStats)


def default_workers():
    return os.cpu_count() or 1


def order_seeds(seeds, trie):
    """Most self-scoring seeds first; ties keep their original order."""
    return sorted(seeds, key=lambda w: -count_words(w, trie))


def search_seeds(
    trie,
    seeds,
    *,
    workers=None,
    record=None,
    use_processes=False,
    abort_on_missing_suffix=True,
    max_depth=None,
    time_limit=None,
    stop_event=None,
):
    """Run ``augment`` on every seed with a fixed pool of workers.

    Blocks until the seed list is exhausted, the time limit passes or
    ``stop_event`` is set, and returns the best record as a PoolResult.
    """
    workers = workers or default_workers()
    record = record if record is not None else BestRecord()
    stop_event = stop_event if stop_event is not None else threading.Event()
    deadline = time.time() + time_limit if time_limit is not None else None
    seeds = list(seeds)

    t0 = time.time()
    if use_processes:
        completed, stats = _run_processes(
            trie, seeds, workers, record, stop_event, abort_on_missing_suffix, max_depth, deadline
        )
    else:
        completed, stats = _run_threads(
            trie, seeds, workers, record, stop_event, abort_on_missing_suffix, max_depth, deadline
        )
    elapsed = time.time() - t0

    score, string = record.snapshot()
    stopped = completed < len(seeds)
    vlog(f"search_seeds: {completed}/{len(seeds)} seeds, {stats.candidates} candidates scored", t0)
    return PoolResult(score, string, len(seeds), completed, elapsed, stopped, stats)


# ============== Thread workers ==============
def _thread_worker(ctx, seed_queue, total):
    completed = 0
    while not ctx.should_stop():
        try:
            idx, seed = seed_queue.get_nowait()
        except queue.Empty:
            break
        start = time.time()
        augment(seed, ctx)
        if ctx.should_stop():
            break
        completed += 1
        vlog(f"Seed {idx + 1}/{total}: {seed}", start)
    return completed


def _run_threads(trie, seeds, workers, record, stop_event, abort_on_missing_suffix, max_depth, deadline):
    seed_queue = queue.Queue()
    for item in enumerate(seeds):
        seed_queue.put(item)

    contexts = [
        SearchContext(
            trie,
            record,
            abort_on_missing_suffix=abort_on_missing_suffix,
            stop_event=stop_event,
            deadline=deadline,
            max_depth=max_depth,
        )
        for _ in range(workers)
    ]

    completed = 0
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_thread_worker, ctx, seed_queue, len(seeds)) for ctx in contexts]
        try:
            concurrent.futures.wait(futures)
        except KeyboardInterrupt:
            log_with_time("Interrupted, waiting for workers to stop…", color=Fore.YELLOW)
            stop_event.set()
            concurrent.futures.wait(futures)
        for future in futures:
            completed += future.result()

    stats = SearchStats()
    for ctx in contexts:
        stats.merge(ctx.stats)
    return completed, stats


# ============== Process workers ==============
# Per-process state, set once by _init_process
_PROCESS_TRIE = None
_PROCESS_OPTIONS = {}

# How often the parent re-checks the caller's stop event while seeds run
POLL_SECONDS = 0.1


def _init_process(words, abort_on_missing_suffix, max_depth, deadline, cache_disabled, stop_event):
    global _PROCESS_TRIE, _PROCESS_OPTIONS
    _PROCESS_TRIE = Trie.build(words)
    _PROCESS_OPTIONS = {
        "abort_on_missing_suffix": abort_on_missing_suffix,
        "max_depth": max_depth,
        "deadline": deadline,
        "stop_event": stop_event,
    }
    score_cache.CACHE_DISABLED = cache_disabled


def _search_seed_in_process(seed, floor):
    """Search one seed with a private record; return its improvements over ``floor``."""
    improvements = []
    record = BestRecord(floor, on_improve=lambda candidate, score: improvements.append((candidate, score)))
    ctx = SearchContext(_PROCESS_TRIE, record, **_PROCESS_OPTIONS)
    augment(seed, ctx)
    return improvements, ctx.stats, not ctx.should_stop()


def _run_processes(trie, seeds, workers, record, stop_event, abort_on_missing_suffix, max_depth, deadline):
    words = list(trie.words())
    stats = SearchStats()
    completed = 0
    pending = {}
    next_idx = 0

    # Handed to every worker process at start-up so running seeds can unwind
    process_stop = multiprocessing.Event()

    def collect(future):
        nonlocal completed
        idx, seed, start = pending.pop(future)
        improvements, seed_stats, finished = future.result()
        for candidate, score in improvements:
            record.offer(candidate, score)
        stats.merge(seed_stats)
        if finished:
            completed += 1
            vlog(f"Seed {idx + 1}/{len(seeds)}: {seed}", start)
        else:
            stop_event.set()

    with concurrent.futures.ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_process,
        initargs=(words, abort_on_missing_suffix, max_depth, deadline, score_cache.CACHE_DISABLED, process_stop),
    ) as executor:
        try:
            while True:
                # Keep a couple of seeds per worker in flight, submitted in order
                while (
                    next_idx < len(seeds)
                    and len(pending) < workers * 2
                    and not stop_event.is_set()
                    and (deadline is None or time.time() < deadline)
                ):
                    seed = seeds[next_idx]
                    future = executor.submit(_search_seed_in_process, seed, record.score)
                    pending[future] = (next_idx, seed, time.time())
                    next_idx += 1
                if not pending:
                    break
                done, _ = concurrent.futures.wait(
                    pending, timeout=POLL_SECONDS, return_when=concurrent.futures.FIRST_COMPLETED
                )
                if stop_event.is_set():
                    process_stop.set()
                for future in done:
                    collect(future)
        except KeyboardInterrupt:
            log_with_time("Interrupted, cancelling queued seeds…", color=Fore.YELLOW)
            stop_event.set()
            process_stop.set()
            for future in list(pending):
                if future.cancel():
                    del pending[future]
            concurrent.futures.wait(pending)
            for future in list(pending):
                # seeds hit by the interrupt themselves carry no results
                if future.exception() is not None:
                    del pending[future]
                    continue
                collect(future)
    return completed, stats
