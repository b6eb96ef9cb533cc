"""
Tests for the streaming multipart reader and the prefix replay stream
"""
import asyncio

import pytest

from core.errors import MultipartReadError
from core.multipart import MultipartReader, PrefixedStream

BOUNDARY = "egamitestboundary"


async def _chunked(data: bytes, size: int):
    for i in range(0, len(data), size):
        yield data[i:i + size]


def _read_parts(body: bytes, chunk_size: int = 7, read_bodies: bool = True):
    async def run():
        parts = []
        reader = MultipartReader(_chunked(body, chunk_size), BOUNDARY.encode())
        async for part in reader.parts():
            content = None
            if read_bodies:
                content = b"".join([chunk async for chunk in part.body])
            parts.append((part.name, part.filename, content))
        return parts

    return asyncio.run(run())


class TestPrefixedStream:
    """Test peeking a stream and replaying it"""

    def test_peek_replays_full_stream(self):
        """Peeked bytes come back ahead of the rest, nothing lost or doubled"""
        data = bytes(range(256)) * 10

        async def run():
            head, stream = await PrefixedStream.peek(_chunked(data, 100).__aiter__(), 150)
            replayed = b"".join([chunk async for chunk in stream])
            return head, replayed

        head, replayed = asyncio.run(run())
        assert head == data[:150]
        assert replayed == data

    def test_peek_short_stream(self):
        """Streams shorter than the peek size are returned whole"""

        async def run():
            head, stream = await PrefixedStream.peek(_chunked(b"tiny", 2).__aiter__(), 8192)
            return head, b"".join([chunk async for chunk in stream])

        assert asyncio.run(run()) == (b"tiny", b"tiny")

    def test_peek_empty_stream(self):
        async def run():
            head, stream = await PrefixedStream.peek(_chunked(b"", 2).__aiter__(), 10)
            return head, [chunk async for chunk in stream]

        assert asyncio.run(run()) == (b"", [])


class TestMultipartReader:
    """Test part iteration over chunked bodies"""

    def test_parts_in_stream_order(self, multipart_body):
        """Parts come out in order with their headers and full content"""
        body, _ = multipart_body(
            [
                ("file", "a.png", b"first" * 50),
                ("note", None, b"hello"),
                ("file", "b", b"second\r\n--not-a-boundary"),
            ]
        )
        parts = _read_parts(body)
        assert parts == [
            ("file", "a.png", b"first" * 50),
            ("note", None, b"hello"),
            ("file", "b", b"second\r\n--not-a-boundary"),
        ]

    def test_single_chunk_body(self, multipart_body):
        body, _ = multipart_body([("file", "x.txt", b"content")])
        assert _read_parts(body, chunk_size=len(body)) == [("file", "x.txt", b"content")]

    def test_unread_parts_are_drained(self, multipart_body):
        """Skipping a part body does not disturb the parts after it"""
        body, _ = multipart_body(
            [("skip", None, b"ignored" * 100), ("file", "keep.txt", b"kept")]
        )
        parts = _read_parts(body, read_bodies=False)
        assert [(name, filename) for name, filename, _ in parts] == [
            ("skip", None),
            ("file", "keep.txt"),
        ]

    def test_truncated_body(self, multipart_body):
        """A body missing its closing boundary is a read error"""
        body, _ = multipart_body([("file", "a.txt", b"data")])
        with pytest.raises(MultipartReadError):
            _read_parts(body[:-10])

    def test_malformed_body(self):
        with pytest.raises(MultipartReadError):
            _read_parts(b"this is not a multipart body")

    def test_empty_body(self):
        """No closing boundary at all is a read error too"""
        with pytest.raises(MultipartReadError):
            _read_parts(b"")
