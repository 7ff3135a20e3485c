"""Out-of-vocabulary handling for words no phrase covers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover
    from .config import PhraseTokenizerConfig
    from .vocab import Vocabulary

OOV_UNKNOWN = "unknown"
OOV_WORDPIECE = "wordpiece"
OOV_POLICIES = (OOV_UNKNOWN, OOV_WORDPIECE)


@dataclass(frozen=True)
class FallbackPiece:
    token: str
    id: int
    start: int
    end: int


class SubwordFallback(Protocol):
    def tokenize(self, word: str) -> list[FallbackPiece]: ...


class UnknownTokenFallback:
    """Maps every unmatched word to a single unknown token."""

    def __init__(self, unknown_token: str, unknown_token_id: int) -> None:
        self.unknown_token = unknown_token
        self.unknown_token_id = unknown_token_id

    def tokenize(self, word: str) -> list[FallbackPiece]:
        return [FallbackPiece(self.unknown_token, self.unknown_token_id, 0, len(word))]


class WordPieceFallback:
    """Splits unmatched words with a Hugging Face WordPiece model over the vocabulary."""

    def __init__(
        self,
        vocab: Vocabulary,
        unknown_token: str,
        unknown_token_id: int,
        *,
        continuing_subword_prefix: str = "##",
        max_input_chars_per_word: int = 100,
    ) -> None:
        try:
            from tokenizers import models  # type: ignore
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "Missing dependency: install `tokenizers` (pip install tokenizers) "
                "or reinstall with `pip install -e '.[dev]'`."
            ) from exc

        pieces = dict(vocab.token_to_id)
        if not vocab.contains(unknown_token):
            # WordPiece needs its unknown token in the table; the id is remapped below.
            pieces[unknown_token] = len(vocab)
        self.unknown_token = unknown_token
        self.unknown_token_id = unknown_token_id
        self.prefix = continuing_subword_prefix
        self._model = models.WordPiece(
            pieces,
            unk_token=unknown_token,
            max_input_chars_per_word=max_input_chars_per_word,
            continuing_subword_prefix=continuing_subword_prefix,
        )

    def tokenize(self, word: str) -> list[FallbackPiece]:
        pieces: list[FallbackPiece] = []
        cursor = 0
        for token in self._model.tokenize(word):
            if token.value == self.unknown_token:
                return [FallbackPiece(self.unknown_token, self.unknown_token_id, 0, len(word))]
            surface = token.value
            if pieces and surface.startswith(self.prefix):
                surface = surface[len(self.prefix):]
            end = cursor + len(surface)
            pieces.append(FallbackPiece(token.value, int(token.id), cursor, end))
            cursor = end
        return pieces


def build_fallback(
    config: PhraseTokenizerConfig,
    vocab: Vocabulary,
    unknown_token_id: int,
) -> SubwordFallback:
    if config.oov_policy == OOV_UNKNOWN:
        return UnknownTokenFallback(config.unknown_token, unknown_token_id)
    if config.oov_policy == OOV_WORDPIECE:
        return WordPieceFallback(
            vocab,
            config.unknown_token,
            unknown_token_id,
            continuing_subword_prefix=config.continuing_subword_prefix,
            max_input_chars_per_word=config.max_input_chars_per_word,
        )
    raise ConfigurationError(
        f"unknown oov_policy {config.oov_policy!r}; expected one of {', '.join(OOV_POLICIES)}"
    )
