"""
Unit tests for split_message - answer chunking for Slack delivery.

Tests verify:
- Chunks join back to the original text
- Every chunk respects the size limit
- Chunk count is ceil(len / size), zero for empty text
- Multi-byte characters are never split apart
"""

import math

import pytest

from relay_bot.chunker import DEFAULT_CHUNK_SIZE, split_message


@pytest.mark.unit
class TestSplitMessage:
    """Test suite for split_message"""

    def test_empty_text_yields_no_chunks(self):
        assert split_message("", 2000) == []

    def test_short_text_is_single_chunk(self):
        assert split_message("hello", 2000) == ["hello"]

    def test_exact_multiple_has_no_trailing_empty_chunk(self):
        chunks = split_message("a" * 4000, 2000)

        assert chunks == ["a" * 2000, "a" * 2000]

    def test_long_answer_split_in_order(self):
        """4500 chars at size 2000 -> 2000, 2000, 500, in order."""
        text = "x" * 2000 + "y" * 2000 + "z" * 500

        chunks = split_message(text, 2000)

        assert [len(c) for c in chunks] == [2000, 2000, 500]
        assert chunks[0] == "x" * 2000
        assert chunks[1] == "y" * 2000
        assert chunks[2] == "z" * 500

    @pytest.mark.parametrize("size", [1, 3, 7, 64, 2000])
    @pytest.mark.parametrize(
        "text",
        [
            "The quick brown fox jumps over the lazy dog.",
            "line one\nline two\n\n" * 40,
            "a",
        ],
    )
    def test_chunks_cover_input_exactly(self, text, size):
        chunks = split_message(text, size)

        assert "".join(chunks) == text
        assert all(0 < len(c) <= size for c in chunks)
        assert len(chunks) == math.ceil(len(text) / size)

    def test_multibyte_characters_stay_whole(self):
        """Emoji and accented characters count as one unit each."""
        text = "héllo 🧠 wörld 🚀" * 10

        chunks = split_message(text, 3)

        assert "".join(chunks) == text
        for chunk in chunks:
            # Every chunk must round-trip through UTF-8 on its own
            assert chunk.encode("utf-8").decode("utf-8") == chunk
            assert len(chunk) <= 3

    def test_default_size_is_slack_limit(self):
        assert DEFAULT_CHUNK_SIZE == 2000
        assert len(split_message("b" * 2001)) == 2

    @pytest.mark.parametrize("size", [0, -5])
    def test_non_positive_size_rejected(self, size):
        with pytest.raises(ValueError):
            split_message("hello", size)
