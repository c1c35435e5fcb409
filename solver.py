import argparse
import sys
import time

from colorama import Fore

import score_cache
import utils
from pool import default_workers, order_seeds, search_seeds
from search import BestRecord
from trie import Trie
from utils import MIN_SEED_LENGTH, WORD_LIST_PATH, log_with_time, report_record, vlog
from wordlist import DictionaryError, load_words, select_seeds, valid_word


def build_parser():
    parser = argparse.ArgumentParser(
        description="Search a word list for the monoglyphic string containing the most dictionary words"
    )
    parser.add_argument(
        "--words", type=str, default=WORD_LIST_PATH,
        help=f"Word list path or http(s) URL (default: {WORD_LIST_PATH})",
    )
    parser.add_argument("--workers", type=int, default=None, help="Number of search workers (default: CPU count)")
    parser.add_argument("--processes", action="store_true", help="Run workers as processes instead of threads")
    parser.add_argument(
        "--min-seed-length", type=int, default=MIN_SEED_LENGTH,
        help=f"Only seed the search with words at least this long (default: {MIN_SEED_LENGTH})",
    )
    parser.add_argument(
        "--seed", action="append", default=None,
        help="Search from this word only (repeatable); overrides --min-seed-length",
    )
    parser.add_argument("--sort-seeds", action="store_true", help="Search seeds with the highest own score first")
    parser.add_argument(
        "--exhaustive-splits", action="store_true",
        help="Keep trying longer trailing fragments after one is missing from the word list",
    )
    parser.add_argument("--max-depth", type=int, default=None, help="Limit the number of growth steps per seed")
    parser.add_argument("--time-limit", type=float, default=None, help="Stop searching after this many seconds")
    parser.add_argument("--no-cache", action="store_true", help="Disable score caching")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--dump", action="store_true", help="Print the filtered word list and exit")
    return parser


def run_solver(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.seed:
        bad = [s for s in args.seed if not valid_word(s)]
        if bad:
            parser.error(f"invalid seed word(s): {', '.join(bad)}")

    utils.start_time = time.time()
    utils.VERBOSE = args.verbose
    score_cache.CACHE_DISABLED = args.no_cache

    t0 = time.time()
    try:
        words = load_words(args.words)
    except DictionaryError as e:
        log_with_time(str(e), color=Fore.RED)
        return 1

    trie = Trie.build(words)
    vlog(f"Trie built ({len(trie)} words)", t0)

    if args.dump:
        trie.dump()
        return 0

    seeds = list(args.seed) if args.seed else select_seeds(words, args.min_seed_length)
    if args.sort_seeds:
        seeds = order_seeds(seeds, trie)

    log_with_time(f"✅ {len(trie)} words, {len(seeds)} seeds")
    if not seeds:
        log_with_time("No seeds to search.", color=Fore.YELLOW)
        return 0

    workers = args.workers or default_workers()
    log_with_time(f"⟳ Searching with {workers} {'processes' if args.processes else 'threads'}…")

    record = BestRecord(on_improve=report_record)
    result = search_seeds(
        trie,
        seeds,
        workers=workers,
        record=record,
        use_processes=args.processes,
        abort_on_missing_suffix=not args.exhaustive_splits,
        max_depth=args.max_depth,
        time_limit=args.time_limit,
    )

    status = " (stopped early)" if result.stopped else ""
    log_with_time(
        f"Best: {result.string or '-'} score {result.score} "
        f"({result.seeds_completed}/{result.seeds_total} seeds in {result.elapsed:.3f}s){status}",
        color=Fore.GREEN,
    )
    if utils.VERBOSE and not args.no_cache:
        score_cache.print_cache_summary()
    return 0


def main():
    sys.exit(run_solver())


if __name__ == "__main__":
    main()
