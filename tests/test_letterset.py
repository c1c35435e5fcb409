import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from letterset import EMPTY, FULL_MASK, LetterSet
from utils import ALPHABET


def test_add_then_contains_every_letter():
    for c in ALPHABET:
        s = EMPTY.add(c)
        assert s.contains(c) is True
        for d in ALPHABET:
            if d != c:
                assert s.contains(d) is False


def test_contains_is_true_for_high_letters():
    # bits above 0 must still read as members
    s = LetterSet.from_word("xyz")
    assert s.contains("x")
    assert s.contains("z")
    assert not s.contains("a")


def test_add_returns_new_value():
    s = LetterSet.from_word("ab")
    t = s.add("c")
    assert s.letters() == "ab"
    assert t.letters() == "abc"
    assert t == LetterSet.from_word("cab")


def test_conflicts_with_shared_letter():
    a = LetterSet.from_word("cat")
    b = LetterSet.from_word("tub")
    assert a.conflicts_with(b)
    assert b.conflicts_with(a)


def test_conflicts_with_disjoint_and_identical():
    a = LetterSet.from_word("dog")
    b = LetterSet.from_word("cat")
    assert not a.conflicts_with(b)
    assert not b.conflicts_with(a)
    assert a.conflicts_with(LetterSet.from_word("god"))
    assert not EMPTY.conflicts_with(EMPTY)
    assert not EMPTY.conflicts_with(a)


def test_len_and_letters_in_order():
    s = LetterSet.from_word("zebra")
    assert len(s) == 5
    assert s.letters() == "aberz"
    assert len(EMPTY) == 0


def test_full_alphabet_fits():
    assert LetterSet.from_word(ALPHABET) == FULL_MASK


def test_out_of_range_bits_rejected():
    if not __debug__:
        pytest.skip("assertions disabled")
    with pytest.raises(AssertionError):
        LetterSet(1 << 26)
    with pytest.raises(AssertionError):
        EMPTY.add("A")
