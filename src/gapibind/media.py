"""
Media sources for uploads.
Everything is normalised onto googleapiclient's MediaUpload interface
since that already gives random access (getbytes) and a known size()
over files, streams and in-memory buffers without holding them in memory.
"""
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO
import io

import filetype
from googleapiclient.http import MediaFileUpload, MediaIoBaseUpload, MediaUpload

# how much of the media is looked at to work out its type
SNIFF_SIZE = 512
DEFAULT_MEDIA_TYPE = "application/octet-stream"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"
# 8MB, resumable chunks must be a multiple of 256KB except the last one
DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024
CHUNK_GRANULARITY = 256 * 1024

MediaSource = MediaUpload | bytes | bytearray | BinaryIO | str | Path

def as_media_upload(source: MediaSource) -> MediaUpload:
    """
    Wrap whatever the caller handed over as a MediaUpload.
    Paths are handed to MediaFileUpload, streams must be seekable.
    """
    if isinstance(source, MediaUpload):
        return source
    if isinstance(source, (bytes, bytearray)):
        return MediaIoBaseUpload(io.BytesIO(bytes(source)), mimetype=None,
                                 chunksize=DEFAULT_CHUNK_SIZE, resumable=True)
    if isinstance(source, (str, Path)):
        return MediaFileUpload(str(source), chunksize=DEFAULT_CHUNK_SIZE, resumable=True)
    if hasattr(source, 'read') and hasattr(source, 'seek'):
        return MediaIoBaseUpload(source, mimetype=None,
                                 chunksize=DEFAULT_CHUNK_SIZE, resumable=True)
    raise TypeError(f"unsupported media source: {type(source).__name__}")

@contextmanager
def media_upload(source: MediaSource) -> Iterator[MediaUpload]:
    """
    as_media_upload() for a with block.  The file opened here for a path
    source is closed on the way out, streams and MediaUploads handed over
    by the caller are left open.
    """
    mu = as_media_upload(source)
    try:
        yield mu
    finally:
        if isinstance(source, (str, Path)):
            mu.stream().close()

def sniff_media_type(head: bytes) -> str:
    """
    Content type from the leading bytes of the media.  Binary formats are
    recognised by signature, otherwise UTF-8 decodable data without
    control characters is text.
    """
    sample = head[:SNIFF_SIZE]
    if not sample:
        return TEXT_MEDIA_TYPE
    t = filetype.guess_mime(sample)
    if t:
        return t
    try:
        sample.decode('utf-8')
    except UnicodeDecodeError as e:
        # a multibyte sequence cut off at the sniff boundary is still text
        if e.reason != 'unexpected end of data':
            return DEFAULT_MEDIA_TYPE
    if any((b < 0x09 or 0x0d < b < 0x20) and b != 0x1b for b in sample):
        return DEFAULT_MEDIA_TYPE
    return TEXT_MEDIA_TYPE

def determine_media_type(media: MediaUpload, media_type: str|None = None) -> str:
    """
    Explicit type wins, then whatever the MediaUpload carries, then
    sniffing the first bytes.  octet-stream on the MediaUpload is the
    'don't know' MediaFileUpload falls back to, so that gets sniffed too.
    Done once, before any upload traffic.
    """
    if media_type:
        return media_type
    own = media.mimetype()
    if own and own != DEFAULT_MEDIA_TYPE:
        return own
    return sniff_media_type(media.getbytes(0, SNIFF_SIZE))

def media_size(media: MediaUpload) -> int:
    size = media.size()
    if size is None or size < 0:
        raise ValueError("media source has no known size")
    return size

def round_chunk_size(size: int) -> int:
    """
    Smallest multiple of 256KB >= size.  0 and negatives (no chunking)
    are passed through.
    """
    if size <= 0 or size % CHUNK_GRANULARITY == 0:
        return size
    return (size // CHUNK_GRANULARITY + 1) * CHUNK_GRANULARITY

def chunk_size_for(media: MediaUpload, requested: int|None = None) -> int:
    """
    Chunk size for a resumable upload of media.  An explicit request wins,
    then the MediaUpload's own setting.  -1 (googleapiclient's 'no
    chunking') means one chunk holding everything.
    """
    size = requested if requested is not None else media.chunksize()
    if size is None or size <= 0:
        return max(media_size(media), 1)
    return size

def read_all(media: MediaUpload) -> bytes:
    return media.getbytes(0, media_size(media))
