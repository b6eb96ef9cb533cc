"""
Streaming multipart/form-data reader

Feeds the request body into python-multipart's push parser one network
chunk at a time and hands the parts out in stream order, so an upload is
never held in memory as a whole.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import Enum

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import ClientDisconnect

from core.errors import MultipartReadError
from core.logger import logger


class PartEvent(str, Enum):
    """Parser events queued between writes"""

    HEADERS = "headers"
    DATA = "data"
    END = "end"


def _decode(value: bytes | None) -> str | None:
    if value is None:
        return None
    return value.decode("utf-8", errors="replace")


class PrefixedStream:
    """
    Async chunk iterator that replays a peeked prefix ahead of the
    remaining chunks of its source.

    Iterating it yields exactly the bytes the source would have yielded
    had nothing been peeked.
    """

    def __init__(self, prefix: bytes, rest: AsyncIterator[bytes]):
        self.prefix = prefix
        self.rest = rest

    @classmethod
    async def peek(
        cls, chunks: AsyncIterator[bytes], size: int
    ) -> tuple[bytes, "PrefixedStream"]:
        """
        Pull chunks until at least `size` bytes are buffered or the
        source ends.

        Returns:
            (head, stream): head is at most `size` bytes, stream yields
            every pulled byte followed by the untouched remainder
        """
        buffered = bytearray()
        while len(buffered) < size:
            try:
                chunk = await chunks.__anext__()
            except StopAsyncIteration:
                break
            buffered.extend(chunk)
        return bytes(buffered[:size]), cls(bytes(buffered), chunks)

    async def __aiter__(self):
        if self.prefix:
            yield self.prefix
        async for chunk in self.rest:
            yield chunk


@dataclass
class FormPart:
    """A single part of a multipart body, headers parsed, body unread"""

    name: str | None
    filename: str | None
    content_type: str | None
    body: AsyncIterator[bytes]

    @classmethod
    def from_headers(
        cls, headers: list[tuple[bytes, bytes]], body: AsyncIterator[bytes]
    ) -> "FormPart":
        options: dict[bytes, bytes] = {}
        content_type = None
        for field, value in headers:
            if field == b"content-disposition":
                _, options = parse_options_header(value)
            elif field == b"content-type":
                content_type = _decode(value)
        return cls(
            name=_decode(options.get(b"name")),
            filename=_decode(options.get(b"filename")),
            content_type=content_type,
            body=body,
        )


class MultipartReader:
    """
    Iterate the parts of a multipart/form-data stream in order.

    Parts must be consumed one after another; whatever the caller leaves
    unread of a part is drained before the next one is produced.
    """

    def __init__(self, chunks: AsyncIterator[bytes], boundary: bytes):
        self._chunks = chunks
        self._events: list[tuple[PartEvent, object]] = []
        self._headers: list[tuple[bytes, bytes]] = []
        self._header_field = b""
        self._header_value = b""
        self._finished = False
        self._parser = MultipartParser(
            boundary,
            {
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_end": self._on_end,
            },
        )

    # Parser callbacks ----

    def _on_part_begin(self) -> None:
        self._headers = []

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers.append((self._header_field.lower(), self._header_value))
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        self._events.append((PartEvent.HEADERS, self._headers))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._events.append((PartEvent.DATA, bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._events.append((PartEvent.END, None))

    def _on_end(self) -> None:
        self._finished = True

    # Iteration ----

    async def _read_events(self):
        try:
            async for chunk in self._chunks:
                self._parser.write(chunk)
                events, self._events = self._events, []
                for event in events:
                    yield event
            self._parser.finalize()
        except MultipartParseError as exc:
            logger.warning("Malformed multipart body: %s", exc)
            raise MultipartReadError() from exc
        except ClientDisconnect as exc:
            logger.warning("Client disconnected during upload")
            raise MultipartReadError() from exc

        events, self._events = self._events, []
        for event in events:
            yield event

        if not self._finished:
            logger.warning("Multipart body ended before the closing boundary")
            raise MultipartReadError()

    @staticmethod
    async def _part_body(events):
        async for kind, payload in events:
            if kind is PartEvent.DATA:
                yield payload
            elif kind is PartEvent.END:
                return

    async def parts(self):
        """Yield FormPart objects in the order they appear in the stream"""
        events = self._read_events()
        async for kind, payload in events:
            if kind is not PartEvent.HEADERS:
                continue
            part = FormPart.from_headers(payload, self._part_body(events))
            yield part
            async for _ in part.body:
                pass
