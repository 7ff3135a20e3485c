import random
import threading

import numpy as np
import pytest

from phrasetok.tokenizers import OutOfRangeIdError, PhraseTokenizer

VOCAB = ["the", "way.", "way", "Show me", "Show"]


def build(**options) -> PhraseTokenizer:
    return PhraseTokenizer.from_vocab(VOCAB, **options)


def test_longest_match_is_greedy() -> None:
    tokens, ids = build(prob=1.0).tokenize("Show me the way.")
    assert tokens == ["Show me", "the", "way."]
    assert ids == [3, 0, 1]


def test_empty_input() -> None:
    assert build().tokenize("") == ([], [])


def test_separator_only_input() -> None:
    assert build().tokenize(" \t \n") == ([], [])


def test_irregular_whitespace_still_matches_phrase() -> None:
    tokens, _ = build().tokenize("  Show\t me\n\nthe   way.")
    assert tokens == ["Show me", "the", "way."]


def test_phrase_must_end_on_word_boundary() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["<UNK>", "the", "the way", "way"])
    tokens, ids = tokenizer.tokenize("the wayward")
    assert tokens == ["the", "<UNK>"]
    assert ids == [1, 0]


def test_unknown_words_use_unknown_token() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["<UNK>"] + VOCAB)
    tokens, ids = tokenizer.tokenize("Show us the way.")
    assert tokens == ["Show", "<UNK>", "the", "way."]
    assert ids == [5, 0, 1, 2]


def test_unknown_token_missing_from_vocab() -> None:
    tokenizer = build()
    tokens, ids = tokenizer.tokenize("Show us")
    assert tokens == ["Show", "<UNK>"]
    assert ids == [4, -1]
    with pytest.raises(OutOfRangeIdError):
        tokenizer.detokenize(ids)


def test_offsets_cover_every_word() -> None:
    text = " Show me  the way.  "
    tokens, _, starts, ends = build().tokenize_with_offsets(text)
    assert [text[s:e] for s, e in zip(starts, ends)] == ["Show me", "the", "way."]
    covered = set()
    for start, end in zip(starts, ends):
        span = set(range(start, end))
        assert not covered & span
        covered |= span
    words = {i for i, ch in enumerate(text) if not ch.isspace()}
    assert words <= covered
    assert all(text[i].isspace() for i in set(range(len(text))) - covered)


def test_offsets_for_multi_space_phrase() -> None:
    text = "Show   me"
    tokens, _, starts, ends = build().tokenize_with_offsets(text)
    assert tokens == ["Show me"]
    assert (starts, ends) == ([0], [9])


def test_liveness_on_random_text() -> None:
    rng = random.Random(7)
    alphabet = ["Show", "me", "the", "way.", "way", "x", "é", " ", "  ", "\n"]
    tokenizer = PhraseTokenizer.from_vocab(VOCAB, prob=0.5, seed=3)
    for _ in range(200):
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
        tokens, ids, starts, ends = tokenizer.tokenize_with_offsets(text)
        assert len(tokens) == len(ids) == len(starts) == len(ends)
        assert starts == sorted(starts)
        assert all(e > s for s, e in zip(starts, ends))
        assert all(b >= a for a, b in zip(ends, starts[1:]))
        covered = "".join("".join(text[s:e].split()) for s, e in zip(starts, ends))
        assert covered == "".join(text.split())


def test_prob_one_always_takes_longest() -> None:
    tokenizer = build(prob=1.0, seed=0)
    for _ in range(500):
        assert tokenizer.tokenize("Show me the way.")[0] == ["Show me", "the", "way."]


def test_prob_zero_takes_shortest() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["<UNK>"] + VOCAB, prob=0.0)
    for _ in range(100):
        assert tokenizer.tokenize("Show me the way.")[0] == ["Show", "<UNK>", "the", "way."]


def test_prob_zero_shortens_to_shortest_candidate() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["a b c", "a b", "a", "b", "c"], prob=0.0)
    assert tokenizer.tokenize("a b c")[0] == ["a", "b", "c"]


def test_regularization_mixes_segmentations() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["<UNK>"] + VOCAB, prob=0.5, seed=11)
    seen = {tuple(tokenizer.tokenize("Show me")[0]) for _ in range(200)}
    assert seen == {("Show me",), ("Show", "<UNK>")}


def test_caller_rng_is_reproducible() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["a b c", "a b", "a", "b", "c"], prob=0.3)
    first = [tokenizer.tokenize("a b c a b c", rng=random.Random(5)) for _ in range(3)]
    second = [tokenizer.tokenize("a b c a b c", rng=random.Random(5)) for _ in range(3)]
    assert first == second


def test_seeded_tokenizers_agree() -> None:
    text = "a b c " * 20
    left = PhraseTokenizer.from_vocab(["a b c", "a b", "a", "b", "c"], prob=0.4, seed=9)
    right = PhraseTokenizer.from_vocab(["a b c", "a b", "a", "b", "c"], prob=0.4, seed=9)
    assert left.tokenize(text) == right.tokenize(text)


def test_shared_instance_across_threads() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["a b c", "a b", "a", "b", "c"], prob=0.5)
    errors: list[Exception] = []

    def work() -> None:
        try:
            for _ in range(200):
                tokens, _ = tokenizer.tokenize("a b c a b")
                assert " ".join(tokens) == "a b c a b"
        except Exception as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=work) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert not errors


def test_detokenize_to_tokens_round_trip() -> None:
    tokenizer = build()
    ids = [4, 3, 0, 2, 1, 1]
    assert tokenizer.detokenize_to_tokens(ids) == [VOCAB[i] for i in ids]


def test_detokenize_joins_with_spaces() -> None:
    tokenizer = build()
    _, ids = tokenizer.tokenize("Show me   the\nway.")
    assert tokenizer.detokenize(ids) == "Show me the way."
    assert tokenizer.decode([]) == ""


@pytest.mark.parametrize("bad_id", [-1, 5, 100])
def test_detokenize_out_of_range(bad_id: int) -> None:
    tokenizer = build()
    with pytest.raises(OutOfRangeIdError) as info:
        tokenizer.detokenize([0, bad_id, 1])
    assert info.value.token_id == bad_id
    assert info.value.position == 1
    assert info.value.vocab_size == 5
    with pytest.raises(IndexError):
        tokenizer.detokenize_to_tokens([bad_id])


def test_encode_and_batches() -> None:
    tokenizer = build()
    batch = tokenizer.encode_batch(["Show me", "the way."])
    assert batch == [[3], [0, 1]]
    assert tokenizer.encode("the") == [0]
    assert tokenizer.detokenize_batch(batch) == ["Show me", "the way."]
    assert tokenizer.vocab_size == 5


def test_duplicate_phrases_use_last_id() -> None:
    tokenizer = PhraseTokenizer.from_vocab(["the", "way", "the"])
    assert tokenizer.tokenize("the way") == (["the", "way"], [2, 1])
    assert tokenizer.vocab.lookup_id("the") == 2


def test_verbose_reports_build(capsys: pytest.CaptureFixture[str]) -> None:
    PhraseTokenizer.from_vocab(VOCAB, verbose=True)
    out = capsys.readouterr().out
    assert "[phrase] built trie" in out
    assert "not in vocabulary" in out


@pytest.mark.parametrize("bad_id", [1.9, "1", None])
def test_detokenize_rejects_non_integer_ids(bad_id) -> None:
    tokenizer = build()
    with pytest.raises(OutOfRangeIdError) as info:
        tokenizer.detokenize_to_tokens([0, bad_id])
    assert info.value.token_id == bad_id
    assert info.value.position == 1


def test_detokenize_accepts_integer_like_ids() -> None:
    tokenizer = build()
    assert tokenizer.detokenize(np.array([3, 0, 1], dtype=np.int64)) == "Show me the way."
