"""
Services for the Uploads API
"""

import re
import uuid
from collections.abc import AsyncIterable, AsyncIterator
from contextlib import aclosing
from pathlib import Path, PurePosixPath
from typing import BinaryIO

import filetype
from fastapi.concurrency import run_in_threadpool
from python_multipart.multipart import parse_options_header

from api.uploads.models import UploadManifest, UploadRecord
from core.errors import (
    InvalidContentType,
    NoFilesUploaded,
    SerializationError,
    StorageWriteError,
)
from core.logger import logger
from core.multipart import FormPart, MultipartReader, PrefixedStream

# Only parts posted under this form field name are stored
UPLOAD_FIELD = "file"

# Enough of the head of a file to hold any common magic number
SNIFF_SIZE = 8192

ID_LENGTH = 8
MAX_ID_ATTEMPTS = 5

# Longer suffixes would push stored names past filesystem limits
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9_-]{1,32}")


def generate_id() -> str:
    """Short id: a fixed 8-character slice of a random UUID's hex digits"""
    return uuid.uuid4().hex[6:6 + ID_LENGTH]


def sniff_extension(head: bytes) -> str:
    """
    Guess a file extension from the magic bytes at the head of a file.

    Args:
        head: First bytes of the file, only SNIFF_SIZE of them are used

    Returns:
        The extension without a leading dot (e.g. "png"), or "" when no
        known signature matches
    """
    if not head:
        return ""
    kind = filetype.guess(head[:SNIFF_SIZE])
    if kind is None:
        return ""
    return kind.extension


def declared_extension(filename: str | None) -> str:
    """Suffix of the declared filename (e.g. ".png"), "" if unusable"""
    if not filename:
        return ""
    suffix = PurePosixPath(filename).suffix
    if _EXTENSION_RE.fullmatch(suffix):
        return suffix
    return ""


def _create_file(data_dir: Path, extension: str) -> tuple[str, BinaryIO]:
    """
    Open a brand new file named <id><extension> under data_dir.

    Files are created exclusively, so an id collision picks a fresh id
    instead of overwriting an earlier upload.
    """
    for _ in range(MAX_ID_ATTEMPTS):
        upload_id = generate_id()
        path = data_dir / f"{upload_id}{extension}"
        try:
            return upload_id, path.open("xb")
        except FileExistsError:
            logger.warning("Upload id collision on %s, retrying", path.name)
        except OSError as exc:
            logger.error("Unable to create %s: %s", path, exc)
            raise StorageWriteError() from exc

    logger.error("No free upload id after %d attempts", MAX_ID_ATTEMPTS)
    raise StorageWriteError()


async def store_part(part: FormPart, data_dir: Path) -> UploadRecord:
    """
    Stream a single upload part to storage.

    The extension comes from the declared filename, or failing that from
    the part's magic bytes. Partially written files are left in place if
    reading or writing fails midway.
    """
    body: AsyncIterable[bytes] = part.body
    extension = declared_extension(part.filename)
    if not extension:
        head, body = await PrefixedStream.peek(part.body, SNIFF_SIZE)
        sniffed = sniff_extension(head)
        if sniffed:
            extension = f".{sniffed}"

    upload_id, handle = await run_in_threadpool(_create_file, data_dir, extension)
    filename = f"{upload_id}{extension}"
    with handle:
        async for chunk in body:
            try:
                await run_in_threadpool(handle.write, chunk)
            except OSError as exc:
                logger.error("Unable to write %s: %s", filename, exc)
                raise StorageWriteError() from exc

    logger.info("Stored upload %s", filename)
    return UploadRecord(id=upload_id, filename=filename)


async def ingest(
    chunks: AsyncIterator[bytes],
    content_type: str | None,
    data_dir: Path,
) -> UploadManifest:
    """
    Store every `file` part of a multipart/form-data body.

    Args:
        chunks: Request body, as it arrives
        content_type: Value of the request's Content-Type header
        data_dir: Storage root

    Returns:
        UploadManifest listing the stored files in part order

    Raises:
        InvalidContentType: Not multipart/form-data, or no boundary
        MultipartReadError: Body is malformed or the client went away
        StorageWriteError: A destination file could not be written
        NoFilesUploaded: The body held no `file` parts
    """
    media_type, params = parse_options_header(content_type)
    boundary = params.get(b"boundary")
    if media_type.strip().lower() != b"multipart/form-data" or not boundary:
        raise InvalidContentType()

    manifest = UploadManifest()
    reader = MultipartReader(chunks, boundary)
    async with aclosing(reader.parts()) as parts:
        async for part in parts:
            if part.name != UPLOAD_FIELD:
                logger.debug("Skipping form field %r", part.name)
                continue
            manifest.uploads.append(await store_part(part, data_dir))

    if not manifest.uploads:
        raise NoFilesUploaded()

    return manifest


def render_manifest(manifest: UploadManifest) -> str:
    """Serialize a manifest to its JSON response body"""
    try:
        return manifest.model_dump_json()
    except ValueError as exc:
        # PydanticSerializationError is a ValueError
        logger.error("Unable to serialize upload manifest: %s", exc)
        raise SerializationError() from exc
