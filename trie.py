# trie.py
# Prefix tree over the filtered dictionary. Each node remembers the letters used
# on its path so whole subtrees can be rejected with one mask test.

import itertools
from typing import Callable, Iterable, Iterator, List, Optional

from letterset import EMPTY, LetterSet, letter_index
from utils import ALPHABET_SIZE


class TrieNode:
    """
    One prefix position:
      - character: letter added by this node (None at the root)
      - terminal: the prefix ending here is a dictionary word
      - partial: the prefix itself, cached for output
      - used: LetterSet of every letter on the path from the root
      - children: 26 slots indexed by letter, None where absent
    Nodes are only mutated while the trie is being built.
    """

    __slots__ = ("character", "terminal", "partial", "used", "children")

    def __init__(self, character: Optional[str] = None, partial: str = "", used: LetterSet = EMPTY):
        self.character = character
        self.terminal = False
        self.partial = partial
        self.used = used
        self.children: List[Optional["TrieNode"]] = [None] * ALPHABET_SIZE

    def insert(self, word: str) -> None:
        if not word:
            self.terminal = True
            return
        character = word[0]
        idx = letter_index(character)
        child = self.children[idx]
        if child is None:
            child = TrieNode(character, self.partial + character, self.used.add(character))
            self.children[idx] = child
        child.insert(word[1:])

    def walk(self, text: str) -> Optional["TrieNode"]:
        """Return the node reached by following ``text``, or None if the path breaks."""
        node = self
        for ch in text:
            node = node.children[letter_index(ch)]
            if node is None:
                return None
        return node

    def find_unconflicted_terminals(self, excluded: int, visit: Callable[["TrieNode"], None]) -> None:
        """Call ``visit`` on every terminal at or below this node whose letters avoid ``excluded``.

        A node whose path shares a letter with ``excluded`` is skipped together
        with its whole subtree. Visiting order is depth-first, a to z.
        """
        if self.used.conflicts_with(excluded):
            return
        if self.terminal:
            visit(self)
        for child in self.children:
            if child is not None:
                child.find_unconflicted_terminals(excluded, visit)

    def iter_terminals(self) -> Iterator["TrieNode"]:
        if self.terminal:
            yield self
        for child in self.children:
            if child is not None:
                yield from child.iter_terminals()

    def __repr__(self) -> str:
        return f"TrieNode({self.partial!r}, terminal={self.terminal})"


_TOKENS = itertools.count(1)


class Trie:
    """Root holder with the word-level API used by the scorer and the search."""

    __slots__ = ("root", "token", "_size")

    def __init__(self):
        self.root = TrieNode()
        # distinct per instance, never reused; keys the shared score cache
        self.token = next(_TOKENS)
        self._size = 0

    @classmethod
    def build(cls, words: Iterable[str]) -> "Trie":
        trie = cls()
        for w in words:
            trie.insert(w)
        return trie

    def insert(self, word: str) -> None:
        node = self.root.walk(word)
        if node is not None and node.terminal:
            return
        self.root.insert(word)
        self._size += 1

    def walk(self, text: str) -> Optional[TrieNode]:
        return self.root.walk(text)

    def contains(self, word: str) -> bool:
        node = self.root.walk(word)
        return node is not None and node.terminal

    def words(self) -> Iterator[str]:
        for node in self.root.iter_terminals():
            yield node.partial

    def dump(self) -> None:
        for word in self.words():
            print(word)

    def __contains__(self, word: str) -> bool:
        return self.contains(word)

    def __len__(self) -> int:
        return self._size
