"""Double-array trie over vocabulary phrases.

The trie lives in three flat ``int32`` arrays indexed by node slot:

* ``base[s]``  - offset added to a character code to find a child of ``s``
* ``check[s]`` - slot of the parent of ``s`` (``-1`` when the slot is free)
* ``value[s]`` - vocabulary id when ``s`` ends a phrase, otherwise ``-1``

Characters are mapped to a dense alphabet (codes ``1..A``) made of the
codepoints that occur in the vocabulary, so lookups never split a codepoint
and unknown characters fail in one dictionary probe.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator, Sequence
from pathlib import Path

import numpy as np

from .errors import ConfigurationError

ROOT = 0
NO_VALUE = -1
FREE = -1
_MAX_SLOTS = int(np.iinfo(np.int32).max)


class PhraseTrie:
    def __init__(
        self,
        base: np.ndarray,
        check: np.ndarray,
        value: np.ndarray,
        alphabet: Sequence[str],
    ) -> None:
        self._base = np.asarray(base, dtype=np.int32)
        self._check = np.asarray(check, dtype=np.int32)
        self._value = np.asarray(value, dtype=np.int32)
        if self._base.ndim != 1 or self._check.ndim != 1 or self._value.ndim != 1:
            raise ConfigurationError("trie arrays must be one-dimensional")
        if not (len(self._base) == len(self._check) == len(self._value)) or len(self._base) == 0:
            raise ConfigurationError("trie arrays must be non-empty and of equal length")
        if (self._base < 0).any() or (self._check < FREE).any() or (self._value < NO_VALUE).any():
            raise ConfigurationError("trie arrays hold negative offsets or ids")
        self._alphabet = list(alphabet)
        self._codes = {ch: code for code, ch in enumerate(self._alphabet, start=1)}
        # Plain lists are much faster than numpy scalars for the per-character walk.
        self._base_list: list[int] = self._base.tolist()
        self._check_list: list[int] = self._check.tolist()
        self._value_list: list[int] = self._value.tolist()

    @classmethod
    def build(cls, phrases: Sequence[str]) -> PhraseTrie:
        """Index ``phrases``; the id of each phrase is its position.

        Duplicate phrases keep the last id. Empty phrases are skipped since
        they can never advance a scan.
        """

        alphabet: dict[str, int] = {}
        children: list[dict[int, int]] = [{}]
        terminal: list[int] = [NO_VALUE]
        for phrase_id, phrase in enumerate(phrases):
            if not phrase:
                continue
            node = ROOT
            for ch in phrase:
                code = alphabet.setdefault(ch, len(alphabet) + 1)
                child = children[node].get(code)
                if child is None:
                    child = len(children)
                    children[node][code] = child
                    children.append({})
                    terminal.append(NO_VALUE)
                node = child
            terminal[node] = phrase_id

        base: list[int] = [0]
        check: list[int] = [ROOT]
        value: list[int] = [NO_VALUE]
        slots = {ROOT: ROOT}
        next_free = 1
        queue = deque([ROOT])

        def grow(size: int) -> None:
            if size > _MAX_SLOTS:
                raise ConfigurationError(
                    f"phrase trie needs {size:,} slots, more than int32 can address"
                )
            missing = size - len(check)
            if missing > 0:
                base.extend([0] * missing)
                check.extend([FREE] * missing)
                value.extend([NO_VALUE] * missing)

        while queue:
            node = queue.popleft()
            slot = slots[node]
            value[slot] = terminal[node]
            kids = children[node]
            if not kids:
                continue
            codes = sorted(kids)

            while next_free < len(check) and check[next_free] != FREE:
                next_free += 1
            offset = max(next_free - codes[0], 0)
            while True:
                grow(offset + codes[-1] + 1)
                if all(check[offset + code] == FREE for code in codes):
                    break
                offset += 1

            base[slot] = offset
            for code in codes:
                target = offset + code
                check[target] = slot
                slots[kids[code]] = target
                queue.append(kids[code])

        ordered = sorted(alphabet, key=alphabet.__getitem__)
        return cls(
            np.array(base, dtype=np.int32),
            np.array(check, dtype=np.int32),
            np.array(value, dtype=np.int32),
            ordered,
        )

    @property
    def num_slots(self) -> int:
        return len(self._check_list)

    @property
    def num_phrases(self) -> int:
        return int(np.count_nonzero(self._value >= 0))

    @property
    def max_id(self) -> int:
        return int(self._value.max())

    def iter_prefix_matches(self, text: str, start: int = 0) -> Iterator[tuple[int, int]]:
        """Yield ``(length, id)`` for each phrase prefixing ``text[start:]``, shortest first."""

        base = self._base_list
        check = self._check_list
        value = self._value_list
        codes = self._codes
        size = len(check)
        node = ROOT
        for pos in range(start, len(text)):
            code = codes.get(text[pos])
            if code is None:
                return
            target = base[node] + code
            if target < 0 or target >= size or check[target] != node:
                return
            node = target
            if value[node] != NO_VALUE:
                yield pos - start + 1, value[node]

    def longest_match(self, text: str, start: int = 0) -> tuple[int, int] | None:
        match = None
        for match in self.iter_prefix_matches(text, start):
            pass
        return match

    def lookup(self, phrase: str) -> int | None:
        if not phrase:
            return None
        for length, phrase_id in self.iter_prefix_matches(phrase):
            if length == len(phrase):
                return phrase_id
        return None

    def contains(self, key: str) -> bool:
        return self.lookup(key) is not None

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        alphabet = np.array([ord(ch) for ch in self._alphabet], dtype=np.int32)
        with path.open("wb") as handle:
            np.savez(handle, base=self._base, check=self._check, value=self._value, alphabet=alphabet)

    @classmethod
    def load(cls, path: Path) -> PhraseTrie:
        try:
            with np.load(Path(path)) as data:
                alphabet = [chr(int(cp)) for cp in data["alphabet"]]
                return cls(data["base"], data["check"], data["value"], alphabet)
        except (OSError, KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"cannot load phrase trie from {path}: {exc}") from exc
