"""
Tests for the fixed-window chunker: window boundaries, ids and hashes.
"""

import hashlib

import pytest

from dualsearch.retrieval import ConfigurationError, FixedWindowChunker
from dualsearch.retrieval.models import compute_chunk_id


def test_windows_cover_content_without_overlap():
    chunker = FixedWindowChunker(chunk_size=4)
    chunks = chunker.chunk("src/a.py", "abcdefghij")

    assert [c.content for c in chunks] == ["abcd", "efgh", "ij"]
    assert [c.loc for c in chunks] == [(0, 4), (4, 8), (8, 10)]
    assert "".join(c.content for c in chunks) == "abcdefghij"


def test_content_of_exact_multiple_has_no_empty_tail():
    chunks = FixedWindowChunker(chunk_size=5).chunk("a.py", "x" * 10)
    assert len(chunks) == 2
    assert chunks[-1].loc == (5, 10)


def test_shorter_than_window_yields_single_chunk():
    chunks = FixedWindowChunker(chunk_size=1000).chunk("a.py", "print('hi')")
    assert len(chunks) == 1
    assert chunks[0].loc == (0, 11)


def test_empty_content_yields_no_chunks():
    assert FixedWindowChunker(chunk_size=4).chunk("a.py", "") == []


def test_ids_are_deterministic_and_keyed_on_path_and_offset():
    chunker = FixedWindowChunker(chunk_size=3)
    first = [c.id for c in chunker.chunk("pkg/mod.py", "abcdefg")]
    second = [c.id for c in chunker.chunk("pkg/mod.py", "ABCDEFG")]
    other_path = [c.id for c in chunker.chunk("pkg/other.py", "abcdefg")]

    assert first == second
    assert len(set(first)) == 3
    assert not set(first) & set(other_path)
    assert first[1] == compute_chunk_id("pkg/mod.py", 3)


def test_content_hash_is_sha256_of_window():
    chunk = FixedWindowChunker(chunk_size=3).chunk("a.py", "abcdef")[1]
    assert chunk.content_hash == hashlib.sha256(b"def").hexdigest()


def test_metadata_is_copied_onto_every_chunk():
    metadata = {"module": "auth", "chunkType": "function"}
    chunks = FixedWindowChunker(chunk_size=2).chunk("a.py", "abcd", metadata)

    assert all(c.metadata == metadata for c in chunks)
    metadata["module"] = "changed"
    assert chunks[0].metadata["module"] == "auth"


def test_payload_carries_location_and_lifted_chunk_type():
    chunk = FixedWindowChunker(chunk_size=2).chunk("a.py", "abcd", {"chunkType": "class"})[1]
    payload = chunk.to_payload("code_chunks")

    assert payload["path"] == "a.py"
    assert payload["loc"] == {"start": 2, "end": 4}
    assert payload["collection"] == "code_chunks"
    assert payload["chunkType"] == "class"
    assert payload["contentHash"] == chunk.content_hash


@pytest.mark.parametrize("size", [0, -5, 2.5, True, "10"])
def test_invalid_chunk_size_is_rejected(size):
    with pytest.raises(ConfigurationError) as exc_info:
        FixedWindowChunker(chunk_size=size)
    assert exc_info.value.stage == "chunk"
