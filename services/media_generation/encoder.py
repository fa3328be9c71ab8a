"""
Media Encoder

Turns a user-supplied file into base64 text for JSON transport. Inputs may
be raw bytes, a binary file-like object, a path on disk, or a data URI as
produced by browser file readers; the data-URI prefix is always stripped.
"""

import base64
import binascii
import logging
import mimetypes
import re
from pathlib import Path
from typing import BinaryIO, Optional, Union

import aiofiles

from .errors import EncodingError
from .models import EncodedMedia

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

_DATA_URI = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*),(?P<data>.*)$", re.DOTALL)

MediaSource = Union[EncodedMedia, bytes, bytearray, str, Path, BinaryIO]


def strip_data_uri(value: str) -> str:
    """Remove a leading `data:<mime>;base64,` prefix if present."""
    match = _DATA_URI.match(value)
    return match.group("data") if match else value


def encode_bytes(data: bytes, mime_type: str) -> EncodedMedia:
    """Encode raw bytes."""
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return EncodedMedia(data=encoded, mime_type=mime_type)


def encode_stream(stream: BinaryIO, mime_type: str) -> EncodedMedia:
    """Read a binary file-like object once and encode its contents."""
    try:
        data = stream.read()
    except (OSError, ValueError) as e:
        # ValueError: read on a closed file
        raise EncodingError(f"Could not read reference file: {e}") from e

    if not isinstance(data, (bytes, bytearray)):
        raise EncodingError("Reference file must be opened in binary mode")

    return encode_bytes(data, mime_type)


async def encode_file(path: Union[str, Path], mime_type: Optional[str] = None) -> EncodedMedia:
    """
    Read a file from disk and encode it.

    Args:
        path: File to read
        mime_type: Override for the guessed mime type

    Returns:
        EncodedMedia for the file
    """
    path = Path(path)
    if mime_type is None:
        mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE

    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except OSError as e:
        raise EncodingError(f"Could not read reference file {path}: {e}") from e

    logger.info(f"Encoded {path.name} ({len(data) / 1024:.1f} KB, {mime_type})")
    return encode_bytes(data, mime_type)


def from_data_uri(value: str, mime_type: Optional[str] = None) -> EncodedMedia:
    """Parse a `data:` URI, keeping its mime type unless one is given."""
    match = _DATA_URI.match(value)
    if not match:
        raise EncodingError("Not a data URI")

    params = match.group("params") or ""
    data = match.group("data")
    if ";base64" not in params:
        raise EncodingError("Only base64 data URIs are supported")

    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Data URI payload is not valid base64: {e}") from e

    return EncodedMedia(
        data=data,
        mime_type=mime_type or match.group("mime") or DEFAULT_MIME_TYPE,
    )


async def encode_media(source: MediaSource, mime_type: Optional[str] = None) -> EncodedMedia:
    """
    Encode any supported source.

    Strings starting with `data:` are treated as data URIs, other strings
    and Path objects as file paths.
    """
    if isinstance(source, EncodedMedia):
        decode_media(source)
        return source
    if isinstance(source, (bytes, bytearray)):
        return encode_bytes(source, mime_type or DEFAULT_MIME_TYPE)
    if isinstance(source, str) and source.startswith("data:"):
        return from_data_uri(source, mime_type)
    if isinstance(source, (str, Path)):
        return await encode_file(source, mime_type)
    if hasattr(source, "read"):
        if mime_type is None:
            name = getattr(source, "name", None)
            guessed = mimetypes.guess_type(str(name))[0] if name else None
            mime_type = guessed or DEFAULT_MIME_TYPE
        return encode_stream(source, mime_type)

    raise EncodingError(f"Unsupported media source: {type(source).__name__}")


def decode_media(encoded: Union[EncodedMedia, str]) -> bytes:
    """Decode an encoded payload (or data URI) back to bytes."""
    data = encoded.data if isinstance(encoded, EncodedMedia) else strip_data_uri(encoded)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Payload is not valid base64: {e}") from e
