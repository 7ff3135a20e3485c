"""Command line helpers for inspecting phrase tokenization."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .phrase_tokenizer import PhraseTokenizer


def cli_tokenize(
    config_path: str,
    texts: Sequence[str],
    *,
    show_offsets: bool = False,
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    console = console or Console()
    tokenizer = PhraseTokenizer.from_file(Path(config_path), verbose=verbose)
    for text in texts:
        tokens, ids, starts, ends = tokenizer.tokenize_with_offsets(text)
        table = Table(title=repr(text))
        table.add_column("token")
        table.add_column("id", justify="right")
        if show_offsets:
            table.add_column("span", justify="right")
        for token, idx, start, end in zip(tokens, ids, starts, ends):
            row = [token, str(idx)]
            if show_offsets:
                row.append(f"{start}:{end}")
            table.add_row(*row)
        console.print(table)


def cli_detokenize(
    config_path: str,
    ids: Sequence[int],
    *,
    console: Console | None = None,
) -> str:
    console = console or Console()
    tokenizer = PhraseTokenizer.from_file(Path(config_path))
    text = tokenizer.detokenize(ids)
    console.print(text, markup=False, highlight=False, soft_wrap=True)
    return text
