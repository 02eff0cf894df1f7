"""Unit tests for the whitespace-preserving tokenizer.

WHY: Word indices are the contract between the estimator, the
synchronizer and every renderer. If the tokenizer drops a character or
counts a dash as a word, the highlight lands on the wrong word.

HOW: Tests cover the round trip, punctuation decomposition, which
chunks are countable, sequential word numbering, Unicode words and the
countable_words helper.

RULES:
- Joining all raw fields must reproduce the input exactly
- Only chunks containing a letter or number are countable
"""

import pytest

from bionic_reader.core.tokenizer import countable_words, tokenize


class TestRoundTrip:
    """Concatenating Token.raw gives back the source text."""

    @pytest.mark.parametrize("text", [
        "",
        "Hello",
        "  leading and trailing  ",
        "Hello,  world!\n\nNew paragraph.\tTabbed",
        "“Quoted,” she said — twice…",
        "e.g. a/b (x) [y] {z}",
        "été naïve 日本語 مرحبا",
    ])
    def test_round_trip(self, text):
        assert "".join(t.raw for t in tokenize(text)) == text

    def test_empty_text_yields_no_tokens(self):
        assert tokenize("") == []

    def test_whitespace_runs_are_single_tokens(self):
        tokens = tokenize("a \n\t b")
        assert [t.raw for t in tokens] == ["a", " \n\t ", "b"]
        assert tokens[1].is_whitespace
        assert not tokens[1].is_countable


class TestPunctuation:
    """Leading and trailing punctuation are split from the core word."""

    def test_trailing_punctuation(self):
        token = tokenize("Hello,")[0]
        assert token.leading_punct == ""
        assert token.core == "Hello"
        assert token.trailing_punct == ","

    def test_leading_and_trailing_punctuation(self):
        token = tokenize("(“wow!”)")[0]
        assert token.leading_punct == "(“"
        assert token.core == "wow"
        assert token.trailing_punct == "!”)"

    def test_apostrophes_and_hyphens_stay_in_core(self):
        tokens = tokenize("don't well-known rock’n’roll")
        cores = [t.core for t in tokens if t.is_countable]
        assert cores == ["don't", "well-known", "rock’n’roll"]

    def test_inner_punctuation_keeps_interior_as_core(self):
        token = tokenize("e.g.")[0]
        assert token.core == "e.g"
        assert token.trailing_punct == "."
        assert token.is_countable

    def test_parts_reassemble_raw(self):
        for token in tokenize("«¿Qué?» ...hmm!! (a/b)"):
            if not token.is_whitespace:
                assert token.leading_punct + token.core + token.trailing_punct == token.raw


class TestCountability:
    """Only tokens with a letter or number get a word_index."""

    def test_em_dash_alone_is_not_countable(self):
        tokens = tokenize("—")
        assert len(tokens) == 1
        assert not tokens[0].is_countable
        assert tokens[0].word_index is None
        assert tokens[0].leading_punct == "—"
        assert tokens[0].core == ""

    def test_em_dash_yields_no_words(self):
        assert countable_words("—") == []

    def test_punctuation_between_words_is_skipped(self):
        tokens = tokenize("one - two ... three")
        assert [t.word_index for t in tokens if not t.is_whitespace] == [0, None, 1, None, 2]

    def test_numbers_are_countable(self):
        assert countable_words("Chapter 12, page 3.") == ["Chapter", "12", "page", "3"]

    def test_underscores_alone_are_not_countable(self):
        assert countable_words("___") == []

    def test_word_indices_are_sequential(self):
        tokens = tokenize("The quick, brown fox — jumps!")
        indices = [t.word_index for t in tokens if t.is_countable]
        assert indices == list(range(5))


class TestUnicode:
    """Letters from any script are words."""

    def test_accented_words(self):
        assert countable_words("Café crème brûlée") == [
            "Café", "crème", "brûlée",
        ]

    def test_non_latin_words(self):
        assert countable_words("Привет мир") == [
            "Привет", "мир",
        ]

    def test_decomposed_accent_stays_in_core(self):
        # NFD "café!": e followed by U+0301 COMBINING ACUTE ACCENT
        token = tokenize("cafe\u0301!")[0]
        assert token.core == "cafe\u0301"
        assert token.trailing_punct == "!"
        assert token.raw == "cafe\u0301!"

    def test_decomposed_accent_with_inner_punctuation(self):
        token = tokenize("(re\u0301sume\u0301/cv)")[0]
        assert token.leading_punct == "("
        assert token.core == "re\u0301sume\u0301/cv"
        assert token.trailing_punct == ")"


class TestCountableWords:
    """countable_words accepts text or a token sequence."""

    def test_from_text_and_tokens_agree(self):
        text = "Hi there, reader!"
        assert countable_words(text) == countable_words(tokenize(text))
        assert countable_words(text) == ["Hi", "there", "reader"]
