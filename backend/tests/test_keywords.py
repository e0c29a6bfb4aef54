"""Tests for keyword extraction."""

from ghostwriter.ingest.keywords import extract_keywords, query_tokens, tokenize


def test_keywords_ordered_by_frequency_then_first_seen() -> None:
    text = "O gato subiu no telhado. O gato dormiu no telhado quente."
    assert extract_keywords(text) == ["gato", "telhado", "subiu", "dormiu", "quente"]


def test_short_tokens_are_ignored() -> None:
    assert extract_keywords("the cat sat on a mat with joy") == ["with"]


def test_portuguese_accents_survive() -> None:
    assert extract_keywords("Ação rápida, AÇÃO certeira!") == ["ação", "rápida", "certeira"]


def test_other_non_ascii_letters_split_words() -> None:
    assert tokenize("naïve façade") == ["na", "ve", "façade"]
    assert extract_keywords("naïve façade") == ["façade"]


def test_punctuation_becomes_whitespace() -> None:
    assert extract_keywords("home-office/remote_work") == ["home", "office", "remote_work"]


def test_at_most_ten_keywords() -> None:
    words = [f"palavra{chr(ord('a') + i)}" for i in range(12)]
    keywords = extract_keywords(" ".join(words))
    assert keywords == words[:10]


def test_extraction_is_idempotent() -> None:
    text = "Escrever bem exige prática. Prática diária, leitura diária e revisão."
    assert extract_keywords(text) == extract_keywords(text)


def test_query_tokens_keep_three_letter_words() -> None:
    assert query_tokens("O gato de Ana faz home office") == ["gato", "ana", "faz", "home", "office"]
