"""Tests for boundary-aware chunk splitting."""

import pytest

from translate_md.translation.chunker import Chunk, ChunkSplitter, split_text

SAMPLE_TEXTS = [
    "",
    "short",
    "First paragraph.\n\nSecond paragraph. It has two sentences.\nAnd a line.",
    "no boundaries at all " * 40,
    "Sentence one. Sentence two! Sentence three? " * 30,
    "line\n" * 200,
    "\n" * 57,
    ". " * 61,
    "mixed\n\ncontent. with\nall kinds!  of\n\n\nbreaks? yes" * 25,
]


def texts(chunks):
    return [c.text for c in chunks]


class TestSplitInvariants:
    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    @pytest.mark.parametrize("max_size", [1, 2, 3, 7, 50, 1000])
    def test_concatenation_reproduces_input(self, text, max_size):
        chunks = list(split_text(text, max_size))

        assert "".join(texts(chunks)) == text

    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    @pytest.mark.parametrize("max_size", [1, 3, 7, 50])
    def test_no_chunk_exceeds_max_size(self, text, max_size):
        for chunk in split_text(text, max_size):
            assert 0 < len(chunk) <= max_size

    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    def test_indices_are_sequential(self, text):
        chunks = list(split_text(text, 7))

        assert [c.index for c in chunks] == list(range(len(chunks)))

    @pytest.mark.parametrize("text", ["\n" * 500, "\n\n" * 300, ". " * 300, "! ? . \n" * 100])
    def test_terminates_on_boundary_only_text(self, text):
        chunks = list(split_text(text, 2))

        # Every step consumes at least one character
        assert len(chunks) <= len(text)
        assert "".join(texts(chunks)) == text


class TestBoundaryPriority:
    def test_prefers_paragraph_break(self):
        text = "abc. def\n\nghi jkl mno"

        assert texts(split_text(text, 14)) == ["abc. def\n\n", "ghi jkl mno"]

    def test_prefers_sentence_end_over_line_break(self):
        text = "one\ntwo. three four five"

        assert texts(split_text(text, 12)) == ["one\ntwo. ", "three four f", "ive"]

    def test_falls_back_to_line_break(self):
        text = "alpha\nbeta gamma delta"

        assert texts(split_text(text, 10)) == ["alpha\n", "beta gamma", " delta"]

    def test_hard_cut_when_no_boundary(self):
        chunks = list(split_text("x" * 25, 10))

        assert [len(c) for c in chunks] == [10, 10, 5]

    def test_paragraph_break_wins_even_if_earlier(self):
        text = "aa\n\nbb. cc. dd. ee"

        assert texts(split_text(text, 15))[0] == "aa\n\n"

    def test_exclamation_and_question_marks_end_sentences(self):
        assert texts(split_text("Wow! Really? yes", 10))[0] == "Wow! "
        assert texts(split_text("Really? Wow! yes", 10))[0] == "Really? "

    def test_remainder_that_fits_is_emitted_whole(self):
        text = "a" * 10

        assert texts(split_text(text, 10)) == [text]


class TestEdgeCases:
    def test_empty_text_yields_no_chunks(self):
        assert list(split_text("", 10)) == []

    @pytest.mark.parametrize("max_size", [0, -1])
    def test_non_positive_max_size_fails_fast(self, max_size):
        with pytest.raises(ValueError):
            split_text("text", max_size)

    def test_large_document_splits_into_three_chunks(self):
        chunks = list(split_text("x" * 25_000, 10_000))

        assert len(chunks) == 3

    def test_chunks_are_consumed_once(self):
        iterator = split_text("a b c. d e f. g h i.", 7)

        assert len(list(iterator)) > 1
        assert list(iterator) == []


class TestChunkSplitter:
    def test_split_uses_configured_size(self):
        splitter = ChunkSplitter(4)

        assert list(splitter.split("abcdefghij")) == [
            Chunk(0, "abcd"),
            Chunk(1, "efgh"),
            Chunk(2, "ij"),
        ]

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            ChunkSplitter(0)
