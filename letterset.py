# letterset.py
# 26-bit membership mask over the lowercase letters.

from utils import ALPHABET, ALPHABET_SIZE

FULL_MASK = (1 << ALPHABET_SIZE) - 1


def letter_index(letter: str) -> int:
    assert "a" <= letter <= "z" and len(letter) == 1, f"not a lowercase letter: {letter!r}"
    return ord(letter) - ord("a")


class LetterSet(int):
    """
    Immutable set of letters stored as an int: bit i is set iff chr(ord('a') + i)
    is a member. Behaves like a plain value; every operation returns a new set.
    """

    __slots__ = ()

    def __new__(cls, bits: int = 0):
        assert 0 <= bits <= FULL_MASK, f"letter mask out of range: {bits:#x}"
        return super().__new__(cls, bits)

    @classmethod
    def from_word(cls, text: str) -> "LetterSet":
        bits = 0
        for ch in text:
            bits |= 1 << letter_index(ch)
        return cls(bits)

    def add(self, letter: str) -> "LetterSet":
        return LetterSet(self | (1 << letter_index(letter)))

    def contains(self, letter: str) -> bool:
        return (self >> letter_index(letter)) & 1 == 1

    def conflicts_with(self, other: int) -> bool:
        return (self & other) != 0

    def letters(self) -> str:
        return "".join(ch for i, ch in enumerate(ALPHABET) if self >> i & 1)

    def __len__(self) -> int:
        return bin(self).count("1")

    def __repr__(self) -> str:
        return f"LetterSet({self.letters()!r})"


EMPTY = LetterSet(0)
