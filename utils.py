# --- utils.py ---

import time
import threading
from colorama import Fore, Style, init

init()

# Default word list location
WORD_LIST_PATH = "/usr/share/dict/words"

ALPHABET = "abcdefghijklmnopqrstuvwxyz"
ALPHABET_SIZE = len(ALPHABET)

# Single-letter lines that still count as words
ACCEPTED_SINGLE_LETTERS = frozenset({"a", "i"})

# Seeds shorter than this are not searched unless named explicitly
MIN_SEED_LENGTH = 6

VERBOSE = False
start_time = None

# Lock used for synchronized printing across threads
PRINT_LOCK = threading.Lock()


def log_with_time(msg, color=Fore.LIGHTBLUE_EX):
    """Print ``msg`` with a timestamp."""
    global start_time
    if start_time is None:
        start_time = time.time()
    elapsed = time.time() - start_time
    mins = int(elapsed // 60)
    secs = elapsed % 60
    timestamp = Style.DIM + f"[{mins:02}:{secs:06.3f}]" + Style.RESET_ALL
    with PRINT_LOCK:
        print(f"{timestamp} {color}{msg}{Style.RESET_ALL}", flush=True)


def vlog(msg, t0=None):
    if VERBOSE:
        if t0 is not None:
            elapsed = time.time() - t0
            log_with_time(f"{msg} (took {elapsed:.3f}s)")
        else:
            log_with_time(msg)


def report_record(candidate, score):
    """Write one improvement as ``<candidate> <score>`` on stdout."""
    with PRINT_LOCK:
        print(f"{candidate} {score}", flush=True)
