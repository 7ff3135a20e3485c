"""Exceptions raised by the phrase tokenizer."""

from __future__ import annotations


class PhraseTokenizerError(Exception):
    """Base class for phrase tokenizer failures."""


class ConfigurationError(PhraseTokenizerError, ValueError):
    """The configuration payload cannot produce a usable tokenizer."""


class OutOfRangeIdError(PhraseTokenizerError, IndexError):
    """A non-integer id, or one outside ``[0, vocab_size)``, was passed to detokenization."""

    def __init__(self, token_id: object, position: int, vocab_size: int) -> None:
        super().__init__(
            f"token id {token_id!r} at position {position} is out of range "
            f"for vocabulary of size {vocab_size}"
        )
        self.token_id = token_id
        self.position = position
        self.vocab_size = vocab_size
