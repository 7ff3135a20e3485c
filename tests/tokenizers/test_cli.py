from pathlib import Path

import pytest
import yaml

from phrasetok.tokenizers.cli import cli_detokenize, cli_tokenize


def write_config(tmp_path: Path) -> Path:
    path = tmp_path / "phrase.yaml"
    path.write_text(yaml.safe_dump({"vocab": ["<UNK>", "Show me", "the", "way."]}))
    return path


def test_cli_tokenize_prints_table(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = write_config(tmp_path)
    cli_tokenize(str(config), ["Show me the way."], show_offsets=True)
    out = capsys.readouterr().out
    assert "Show me" in out
    assert "0:7" in out
    assert "way." in out


def test_cli_detokenize(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = write_config(tmp_path)
    text = cli_detokenize(str(config), [1, 2, 3])
    assert text == "Show me the way."
    assert "Show me the way." in capsys.readouterr().out
