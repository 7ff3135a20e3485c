#!/usr/bin/env python3
"""CLI for tokenizing text into phrases, or turning phrase ids back into text."""

from __future__ import annotations

import argparse
import sys

from phrasetok.tokenizers.cli import cli_detokenize, cli_tokenize
from phrasetok.tokenizers.errors import PhraseTokenizerError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Phrase tokenizer inspection tool")
    parser.add_argument("--config", required=True, help="Tokenizer YAML/JSON config path")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--text", nargs="+", help="Text(s) to tokenize")
    group.add_argument("--ids", nargs="+", type=int, help="Token ids to detokenize")
    parser.add_argument("--offsets", action="store_true", help="Show codepoint spans per token")
    parser.add_argument("--verbose", action="store_true", help="Print tokenizer build stats")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    try:
        if args.text:
            cli_tokenize(args.config, args.text, show_offsets=args.offsets, verbose=args.verbose)
        else:
            cli_detokenize(args.config, args.ids)
    except PhraseTokenizerError as exc:
        print(f"[phrase] error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
