import time

import requests

from utils import ACCEPTED_SINGLE_LETTERS, MIN_SEED_LENGTH, vlog


class DictionaryError(RuntimeError):
    """The word list could not be opened, read or downloaded."""


def valid_word(line, single_letters=ACCEPTED_SINGLE_LETTERS):
    """True for lowercase a-z words with no repeated letter.

    One-letter lines only pass when listed in ``single_letters``.
    """
    if not line:
        return False
    if len(line) == 1 and line not in single_letters:
        return False
    seen = 0
    for ch in line:
        if ch < "a" or ch > "z":
            return False
        bit = 1 << (ord(ch) - ord("a"))
        if seen & bit:
            return False
        seen |= bit
    return True


def filter_words(lines, single_letters=ACCEPTED_SINGLE_LETTERS):
    """Filter raw lines, dropping duplicates but keeping first-seen order.

    Only the line ending is removed; any other whitespace fails the filter.
    """
    seen = set()
    words = []
    for raw in lines:
        w = raw.rstrip("\r\n")
        if w in seen or not valid_word(w, single_letters):
            continue
        seen.add(w)
        words.append(w)
    return words


def _read_lines(source):
    if source.startswith(("http://", "https://")):
        try:
            resp = requests.get(source, timeout=30)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DictionaryError(f"Could not download word list {source}: {e}") from e
        return resp.text.splitlines()
    try:
        with open(source, "r", encoding="utf-8", errors="replace") as f:
            return f.read().splitlines()
    except OSError as e:
        raise DictionaryError(f"Could not read word list {source}: {e}") from e


def load_words(source, single_letters=ACCEPTED_SINGLE_LETTERS):
    """Load and filter the word list at ``source`` (a path or an http(s) URL)."""
    t0 = time.time()
    lines = _read_lines(str(source))
    words = filter_words(lines, single_letters)
    vlog(f"Word list {source}: kept {len(words)} of {len(lines)} lines", t0)
    return words


def select_seeds(words, min_length=MIN_SEED_LENGTH):
    return [w for w in words if len(w) >= min_length]
