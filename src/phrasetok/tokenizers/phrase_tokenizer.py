"""Phrase tokenizer: greedy longest-match segmentation over a phrase vocabulary."""

from __future__ import annotations

import operator
import random
import threading
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from .boundary import WhitespaceBoundary
from .config import PhraseTokenizerConfig, load_config
from .errors import ConfigurationError, OutOfRangeIdError
from .fallback import OOV_WORDPIECE, build_fallback
from .trie import PhraseTrie
from .vocab import Vocabulary

UNKNOWN_ID = -1
SEPARATOR = " "


def _mismatched_phrases(vocab: Vocabulary, trie: PhraseTrie) -> list[str]:
    return [
        phrase
        for phrase, phrase_id in vocab.token_to_id.items()
        if phrase and trie.lookup(phrase) != phrase_id
    ]


class PhraseTokenizer:
    """Splits text into vocabulary phrases that may span several words.

    Example::

        >>> tok = PhraseTokenizer.from_vocab(["the", "way.", "way", "Show me", "Show"])
        >>> tok.tokenize("Show me the way.")
        (['Show me', 'the', 'way.'], [3, 0, 1])

    Words are found by the boundary segmenter and rejoined with single
    spaces, so a phrase matches only if it ends on a word boundary. With
    ``prob < 1`` each longest match is rejected with probability
    ``1 - prob`` in favour of the next shorter candidate.
    """

    def __init__(self, config: PhraseTokenizerConfig, *, verbose: bool = False) -> None:
        config.validate()
        self.config = config
        self.verbose = verbose
        self.vocab = Vocabulary(config.vocab)
        self.prob = float(config.prob)
        self.boundary = WhitespaceBoundary(config.whitespace_config)

        if config.trie_path:
            self.trie = PhraseTrie.load(Path(config.trie_path))
            if self.trie.max_id >= len(self.vocab):
                raise ConfigurationError(
                    f"trie references id {self.trie.max_id} but vocabulary has {len(self.vocab)} entries"
                )
            mismatched = _mismatched_phrases(self.vocab, self.trie)
            if mismatched:
                raise ConfigurationError(
                    f"trie disagrees with the vocabulary on {len(mismatched)} phrases, "
                    f"e.g. {mismatched[0]!r}"
                )
            indexed = sum(1 for phrase in self.vocab.token_to_id if phrase)
            if self.trie.num_phrases != indexed:
                raise ConfigurationError(
                    f"trie holds {self.trie.num_phrases} phrases but the vocabulary has {indexed}"
                )
        else:
            self.trie = PhraseTrie.build(self.vocab.id_to_token)

        if config.unknown_token_id is not None:
            self.unknown_token_id = config.unknown_token_id
        else:
            found = self.vocab.lookup_id(config.unknown_token)
            self.unknown_token_id = UNKNOWN_ID if found is None else found
        self.fallback = build_fallback(config, self.vocab, self.unknown_token_id)

        self._rng = random.Random(config.seed)
        self._rng_lock = threading.Lock()

        self._log(
            f"built trie: phrases={self.trie.num_phrases:,} slots={self.trie.num_slots:,} "
            f"vocab={len(self.vocab):,} prob={self.prob} oov={config.oov_policy}"
        )
        if self.vocab.has_duplicates:
            self._log("vocabulary has duplicate phrases; the last id of each is used")
        if self.unknown_token_id == UNKNOWN_ID:
            self._log(
                f"unknown token {config.unknown_token!r} not in vocabulary; "
                f"unmatched words get id {UNKNOWN_ID}"
            )

    @classmethod
    def create(
        cls,
        payload: PhraseTokenizerConfig | Mapping[str, Any] | None,
        *,
        verbose: bool = False,
    ) -> PhraseTokenizer:
        if payload is None:
            raise ConfigurationError("configuration payload is missing")
        if isinstance(payload, PhraseTokenizerConfig):
            return cls(payload, verbose=verbose)
        return cls(PhraseTokenizerConfig.from_dict(payload), verbose=verbose)

    @classmethod
    def from_file(cls, path: Path, *, verbose: bool = False) -> PhraseTokenizer:
        return cls(load_config(path), verbose=verbose)

    @classmethod
    def from_vocab(cls, tokens: Iterable[str], **options: Any) -> PhraseTokenizer:
        verbose = options.pop("verbose", False)
        payload = {"vocab": list(tokens), **options}
        return cls.create(payload, verbose=verbose)

    @property
    def vocab_size(self) -> int:
        return len(self.vocab)

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[phrase] {message}", flush=True)

    def _reject_longer(self, rng: random.Random | None) -> bool:
        if rng is not None:
            return rng.random() >= self.prob
        with self._rng_lock:
            return self._rng.random() >= self.prob

    def _choose(self, candidates: list[tuple[int, int]], rng: random.Random | None) -> tuple[int, int]:
        choice = len(candidates) - 1
        if self.prob < 1.0:
            while choice > 0 and self._reject_longer(rng):
                choice -= 1
        return candidates[choice]

    def tokenize_with_offsets(
        self,
        text: str,
        rng: random.Random | None = None,
    ) -> tuple[list[str], list[int], list[int], list[int]]:
        """Tokenize ``text`` and report codepoint ``[start, end)`` offsets per token."""

        tokens: list[str] = []
        ids: list[int] = []
        starts: list[int] = []
        ends: list[int] = []

        spans = list(self.boundary.iter_spans(text))
        if not spans:
            return tokens, ids, starts, ends

        words = [text[start:end] for start, end in spans]
        joined = SEPARATOR.join(words)
        word_starts: list[int] = []
        end_to_word: dict[int, int] = {}
        pos = 0
        for idx, word in enumerate(words):
            word_starts.append(pos)
            pos += len(word)
            end_to_word[pos] = idx
            pos += len(SEPARATOR)

        cur = 0
        while cur < len(words):
            start = word_starts[cur]
            candidates = [
                match
                for match in self.trie.iter_prefix_matches(joined, start)
                if start + match[0] in end_to_word
            ]
            if not candidates:
                word_start = spans[cur][0]
                for piece in self.fallback.tokenize(words[cur]):
                    tokens.append(piece.token)
                    ids.append(piece.id)
                    starts.append(word_start + piece.start)
                    ends.append(word_start + piece.end)
                cur += 1
                continue

            length, phrase_id = self._choose(candidates, rng)
            last = end_to_word[start + length]
            tokens.append(joined[start : start + length])
            ids.append(phrase_id)
            starts.append(spans[cur][0])
            ends.append(spans[last][1])
            cur = last + 1

        return tokens, ids, starts, ends

    def tokenize(self, text: str, rng: random.Random | None = None) -> tuple[list[str], list[int]]:
        tokens, ids, _, _ = self.tokenize_with_offsets(text, rng)
        return tokens, ids

    def encode(self, text: str) -> list[int]:
        return self.tokenize(text)[1]

    def encode_batch(self, texts: Sequence[str]) -> list[list[int]]:
        return [self.encode(text) for text in texts]

    def detokenize_to_tokens(self, ids: Sequence[int]) -> list[str]:
        tokens: list[str] = []
        for position, idx in enumerate(ids):
            try:
                token = self.vocab.lookup_phrase(operator.index(idx))
            except TypeError:
                # Floats and other non-integral ids are rejected, never truncated.
                token = None
            if token is None:
                raise OutOfRangeIdError(idx, position, len(self.vocab))
            tokens.append(token)
        return tokens

    def detokenize(self, ids: Sequence[int]) -> str:
        tokens = self.detokenize_to_tokens(ids)
        glue_prefix = (
            self.config.continuing_subword_prefix if self.config.oov_policy == OOV_WORDPIECE else None
        )
        parts: list[str] = []
        for token in tokens:
            if parts and glue_prefix and token.startswith(glue_prefix) and len(token) > len(glue_prefix):
                parts.append(token[len(glue_prefix) :])
                continue
            if parts:
                parts.append(SEPARATOR)
            parts.append(token)
        return "".join(parts)

    def decode(self, ids: Sequence[int]) -> str:
        return self.detokenize(ids)

    def detokenize_batch(self, batch: Iterable[Sequence[int]]) -> list[str]:
        return [self.detokenize(ids) for ids in batch]
