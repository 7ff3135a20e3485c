"""Dataclass and loader for phrase tokenizer configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .boundary import build_whitespace_config
from .errors import ConfigurationError
from .fallback import OOV_POLICIES, OOV_UNKNOWN
from .vocab import load_vocab

_KNOWN_KEYS = {
    "vocab",
    "vocab_file",
    "whitespace_config",
    "whitespace_chars",
    "prob",
    "unknown_token",
    "unknown_token_id",
    "oov_policy",
    "continuing_subword_prefix",
    "max_input_chars_per_word",
    "seed",
    "trie_file",
}


@dataclass
class PhraseTokenizerConfig:
    vocab: list[str] = field(default_factory=list)
    whitespace_config: bytes | None = None
    prob: float = 1.0
    unknown_token: str = "<UNK>"
    unknown_token_id: int | None = None
    oov_policy: str = OOV_UNKNOWN
    continuing_subword_prefix: str = "##"
    max_input_chars_per_word: int = 100
    seed: int | None = None
    trie_path: str | None = None

    def validate(self) -> None:
        if not self.vocab:
            raise ConfigurationError("vocabulary is empty")
        if not all(isinstance(token, str) for token in self.vocab):
            raise ConfigurationError("vocabulary entries must be strings")
        if isinstance(self.prob, bool) or not isinstance(self.prob, (int, float)):
            raise ConfigurationError(f"prob must be a number, got {self.prob!r}")
        if not 0.0 <= float(self.prob) <= 1.0:
            raise ConfigurationError(f"prob must be within [0, 1], got {self.prob}")
        if self.oov_policy not in OOV_POLICIES:
            raise ConfigurationError(
                f"unknown oov_policy {self.oov_policy!r}; expected one of {', '.join(OOV_POLICIES)}"
            )
        if not isinstance(self.unknown_token, str) or not self.unknown_token:
            raise ConfigurationError("unknown_token must be a non-empty string")
        if not isinstance(self.continuing_subword_prefix, str) or not self.continuing_subword_prefix:
            raise ConfigurationError("continuing_subword_prefix must be a non-empty string")
        if self.unknown_token_id is not None:
            if isinstance(self.unknown_token_id, bool) or not isinstance(self.unknown_token_id, int):
                raise ConfigurationError(f"unknown_token_id must be an integer, got {self.unknown_token_id!r}")
            if self.unknown_token_id != -1 and not 0 <= self.unknown_token_id < len(self.vocab):
                raise ConfigurationError(
                    f"unknown_token_id {self.unknown_token_id} is outside the vocabulary of "
                    f"{len(self.vocab)} entries (use -1 for no id)"
                )
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError(f"seed must be an integer, got {self.seed!r}")
        if self.trie_path is not None and not isinstance(self.trie_path, str):
            raise ConfigurationError("trie_path must be a string")
        if (
            isinstance(self.max_input_chars_per_word, bool)
            or not isinstance(self.max_input_chars_per_word, int)
            or self.max_input_chars_per_word < 1
        ):
            raise ConfigurationError("max_input_chars_per_word must be positive")
        if self.whitespace_config is not None and not isinstance(self.whitespace_config, bytes):
            raise ConfigurationError("whitespace_config must be bytes")

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        base_dir: Path | None = None,
    ) -> PhraseTokenizerConfig:
        """Build a config from a parsed mapping.

        ``vocab_file`` and ``trie_file`` are resolved against ``base_dir``;
        ``whitespace_chars`` is packed into a whitespace bitmap.
        """

        if not isinstance(data, Mapping):
            raise ConfigurationError("configuration payload must be a mapping")
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

        def resolve(key: str, value: Any) -> Path:
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"{key} must be a non-empty path string, got {value!r}")
            path = Path(value).expanduser()
            if base_dir is not None and not path.is_absolute():
                path = Path(base_dir) / path
            return path

        if "vocab" in data and "vocab_file" in data:
            raise ConfigurationError("give either vocab or vocab_file, not both")
        if "vocab_file" in data:
            vocab_path = resolve("vocab_file", data["vocab_file"])
            try:
                vocab = list(load_vocab(vocab_path).id_to_token)
            except (OSError, KeyError, TypeError, ValueError) as exc:
                raise ConfigurationError(f"cannot read vocabulary from {vocab_path}: {exc}") from exc
        else:
            vocab = data.get("vocab")
            if not isinstance(vocab, list):
                raise ConfigurationError("vocab must be a list of phrases")

        whitespace = data.get("whitespace_config")
        if "whitespace_chars" in data:
            if whitespace is not None:
                raise ConfigurationError("give either whitespace_config or whitespace_chars, not both")
            chars = data["whitespace_chars"]
            if not isinstance(chars, str):
                raise ConfigurationError(f"whitespace_chars must be a string, got {chars!r}")
            whitespace = build_whitespace_config(chars)

        trie_file = data.get("trie_file")
        if trie_file is not None:
            trie_file = str(resolve("trie_file", trie_file))
        config = cls(
            vocab=list(vocab),
            whitespace_config=whitespace,
            prob=data.get("prob", 1.0),
            unknown_token=data.get("unknown_token", "<UNK>"),
            unknown_token_id=data.get("unknown_token_id"),
            oov_policy=data.get("oov_policy", OOV_UNKNOWN),
            continuing_subword_prefix=data.get("continuing_subword_prefix", "##"),
            max_input_chars_per_word=data.get("max_input_chars_per_word", 100),
            seed=data.get("seed"),
            trie_path=trie_file,
        )
        config.validate()
        return config


def load_config(path: Path) -> PhraseTokenizerConfig:
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot read configuration {path}: {exc}") from exc
    if data is None:
        raise ConfigurationError(f"configuration {path} is empty")
    return PhraseTokenizerConfig.from_dict(data, base_dir=path.parent)
