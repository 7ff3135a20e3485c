"""Phrase tokenizer and its building blocks."""

from .boundary import BoundarySegmenter, WhitespaceBoundary, build_whitespace_config
from .config import PhraseTokenizerConfig, load_config
from .errors import ConfigurationError, OutOfRangeIdError, PhraseTokenizerError
from .fallback import UnknownTokenFallback, WordPieceFallback
from .phrase_tokenizer import PhraseTokenizer
from .trie import PhraseTrie
from .vocab import VocabLookup, Vocabulary, load_vocab, save_vocab

__all__ = [
    "BoundarySegmenter",
    "WhitespaceBoundary",
    "build_whitespace_config",
    "PhraseTokenizerConfig",
    "load_config",
    "ConfigurationError",
    "OutOfRangeIdError",
    "PhraseTokenizerError",
    "UnknownTokenFallback",
    "WordPieceFallback",
    "PhraseTokenizer",
    "PhraseTrie",
    "VocabLookup",
    "Vocabulary",
    "load_vocab",
    "save_vocab",
]
