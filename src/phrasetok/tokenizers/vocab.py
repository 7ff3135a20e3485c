"""Immutable phrase vocabulary."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol


class VocabLookup(Protocol):
    """Anything that can answer exact, case-sensitive membership queries."""

    def contains(self, key: str) -> bool: ...


class Vocabulary:
    """Ordered phrase list with id <-> phrase lookups.

    Ids are the positions in ``id_to_token``. When the same phrase appears
    more than once, ``token_to_id`` keeps the last id assigned to it.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        self.id_to_token: tuple[str, ...] = tuple(tokens)
        self.token_to_id: dict[str, int] = {}
        for idx, token in enumerate(self.id_to_token):
            self.token_to_id[token] = idx

    def __len__(self) -> int:
        return len(self.id_to_token)

    def __contains__(self, phrase: object) -> bool:
        return phrase in self.token_to_id

    def size(self) -> int:
        return len(self.id_to_token)

    def contains(self, key: str) -> bool:
        return key in self.token_to_id

    def lookup_id(self, phrase: str) -> int | None:
        return self.token_to_id.get(phrase)

    def lookup_phrase(self, idx: int) -> str | None:
        # Returns None rather than raising so callers decide what absence means.
        if idx < 0 or idx >= len(self.id_to_token):
            return None
        return self.id_to_token[idx]

    @property
    def has_duplicates(self) -> bool:
        return len(self.token_to_id) != len(self.id_to_token)


def save_vocab(vocab: Vocabulary, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"tokens": list(vocab.id_to_token)}
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def load_vocab(path: Path) -> Vocabulary:
    """Load a vocabulary from ``{"tokens": [...]}`` JSON or a one-phrase-per-line file."""

    path = Path(path)
    raw = path.read_text(encoding="utf-8")
    if path.suffix == ".txt":
        return Vocabulary(raw.splitlines())
    data = json.loads(raw)
    return Vocabulary(data["tokens"])
