"""
Media upload protocols.

Resumable upload is the only multi-request exchange in the library:

    INITIATING      one request to the method's upload path with
                    uploadType=resumable and the JSON metadata as body.
                    The session URI comes back in the Location header.
    CHUNK_UPLOADING PUT consecutive byte ranges of the media to the
                    session URI.  308 means 'incomplete, continue' and its
                    Range header says how much the server has committed.
    COMPLETED       a 2xx on a chunk, its body is the created resource.
    FAILED          any error on the way.  The session is abandoned, though
                    the server keeps it, see ResumableUpload.resume().

Chunks are strictly sequential, each range starts where the server's
acknowledgement of the previous one left off.  Nothing is retried: a 308
that acknowledges none of the chunk just sent fails the upload.

Simple (uploadType=media) and multipart (uploadType=multipart) uploads are
a single request and only need the request body built here.
"""
from dataclasses import replace
from enum import Enum
from typing import Any, Callable
import logging
import re
import uuid

from googleapiclient.http import MediaUpload

from .errors import GoogleApiError, UploadSessionError
from .media import MediaSource, as_media_upload, chunk_size_for, determine_media_type, media_size, read_all
from .transport import CancelSignal, HttpRequest, HttpResponse, Transport, check_response, decode_response

logger = logging.getLogger(__name__)

# returned by the upload server while the upload is not yet complete
RESUME_INCOMPLETE = 308

_RANGE_RE = re.compile(r"^bytes=0-(?P<end>\d+)$", flags=re.IGNORECASE)

ProgressCallback = Callable[[int], Any]

class UploadState(Enum):
    INITIATING = "initiating"
    CHUNK_UPLOADING = "chunk_uploading"
    COMPLETED = "completed"
    FAILED = "failed"

class ResumableUpload():
    """
    One resumable upload attempt.  Owns exactly one session URI, obtained
    by initiate() and never changed afterwards.
    The media type is settled in the constructor (given, carried by the
    MediaUpload or sniffed) so it is known before any traffic and is only
    sent on the initiating request.
    """
    def __init__(self, transport: Transport,
                 media: MediaSource,
                 media_type: str|None = None,
                 chunk_size: int|None = None,
                 progress_callback: ProgressCallback|None = None,
                 result_type: type|None = None) -> None:
        self._transport = transport
        self._media: MediaUpload = as_media_upload(media)
        self._total = media_size(self._media)
        self._media_type = determine_media_type(self._media, media_type)
        self._chunk_size = chunk_size_for(self._media, chunk_size)
        self._callback = progress_callback
        self._result_type = result_type
        self._state = UploadState.INITIATING
        self._session_uri: str|None = None
        self._progress = 0
        self._result = None
        self.response_headers: dict = {}

    def __str__(self) -> str:
        return f"{self._state.value}:{self._progress}/{self._total}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @classmethod
    def resume(cls, transport: Transport, session_uri: str, media: MediaSource,
               media_type: str|None = None,
               chunk_size: int|None = None,
               progress_callback: ProgressCallback|None = None,
               result_type: type|None = None) -> "ResumableUpload":
        """
        Pick up a session started earlier, e.g. by another process that
        persisted the session URI.  Call query_status() before upload() to
        learn how much the server already has.
        """
        if not session_uri:
            raise ValueError("session_uri is required to resume an upload")
        rx = cls(transport, media, media_type, chunk_size, progress_callback, result_type)
        rx._session_uri = session_uri
        rx._state = UploadState.CHUNK_UPLOADING
        return rx

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def session_uri(self) -> str|None:
        return self._session_uri

    @property
    def progress(self) -> int:
        """Bytes the server has acknowledged so far."""
        return self._progress

    @property
    def total(self) -> int:
        return self._total

    @property
    def media_type(self) -> str:
        return self._media_type

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def finished(self) -> bool:
        return self._state in (UploadState.COMPLETED, UploadState.FAILED)

    @property
    def result(self) -> Any:
        return self._result

    def _require(self, state: UploadState) -> None:
        if self._state != state:
            raise RuntimeError(f"upload is {self._state.value}, expected {state.value}")

    def _fail(self) -> None:
        self._state = UploadState.FAILED

    def initiate(self, request: HttpRequest,
                 cancel: CancelSignal|None = None,
                 timeout: float|None = None) -> str:
        """
        Send the session creating request (already carrying
        uploadType=resumable and the metadata body) and keep the session URI.
        """
        self._require(UploadState.INITIATING)
        headers = request.headers + (('X-Upload-Content-Type', self._media_type),
                                     ('X-Upload-Content-Length', str(self._total)))
        try:
            response = check_response(self._transport.send(replace(request, headers=headers),
                                                           cancel, timeout))
        except GoogleApiError:
            self._fail()
            raise
        location = response.headers.get('Location', None)
        if not location:
            self._fail()
            raise UploadSessionError("session creation response has no Location header",
                                     response.status, response.text, response.headers)
        self._session_uri = location
        self._state = UploadState.CHUNK_UPLOADING
        logger.debug("upload session %s for %d bytes of %s", location, self._total, self._media_type)
        return location

    def _committed(self, response: HttpResponse) -> int:
        """Total bytes the server holds according to a 308's Range header."""
        bytes_range = response.headers.get('Range', None)
        if not bytes_range:
            return 0
        m = _RANGE_RE.match(bytes_range.strip())
        if m is None:
            raise UploadSessionError(f"unexpected Range header {bytes_range!r}",
                                     response.status, response.text, response.headers)
        return int(m.group('end')) + 1

    def _advance(self, confirmed: int) -> None:
        """Move the cursor forward by what the server confirmed, then report."""
        if confirmed < 0 or self._progress + confirmed > self._total:
            raise UploadSessionError(f"server acknowledged {confirmed} bytes at offset "
                                     f"{self._progress} of {self._total}")
        self._progress += confirmed
        self._report()

    def _report(self) -> None:
        if self._callback is None:
            return
        try:
            self._callback(self._progress)
        except Exception as e:
            # progress reporting must never take the upload down with it
            logger.warning("upload progress callback failed: %s", e)

    def _chunk_request(self) -> tuple[HttpRequest, int]:
        start = self._progress
        length = min(self._chunk_size, self._total - start)
        if length > 0:
            content_range = f"bytes {start}-{start + length - 1}/{self._total}"
            data = self._media.getbytes(start, length)
        else:
            content_range = f"bytes */{self._total}"
            data = b""
        return HttpRequest('PUT', self._session_uri, (('Content-Range', content_range),), data), length

    def _complete(self, response: HttpResponse) -> None:
        try:
            result = decode_response(response, self._result_type)
        except GoogleApiError:
            self._fail()
            raise
        self._state = UploadState.COMPLETED
        self._result = result
        self.response_headers = response.headers
        if self._progress != self._total:
            self._progress = self._total
            self._report()
        logger.debug("upload session %s complete", self._session_uri)

    def transfer_chunk(self, cancel: CancelSignal|None = None,
                       timeout: float|None = None) -> bool:
        """
        Upload the next chunk.  True once the upload has completed.
        A partially acknowledged chunk keeps its acknowledged prefix, the
        next chunk starts right after it.
        """
        self._require(UploadState.CHUNK_UPLOADING)
        request, length = self._chunk_request()
        start = self._progress
        try:
            response = self._transport.send(request, cancel, timeout)
            if response.status == RESUME_INCOMPLETE:
                committed = self._committed(response)
                if committed and committed < start:
                    raise UploadSessionError(f"server committed {committed} bytes, "
                                             f"{start} were already acknowledged",
                                             response.status, response.text, response.headers)
                confirmed = max(committed - start, 0)
                if confirmed == 0:
                    raise UploadSessionError(f"server acknowledged nothing of chunk "
                                             f"{request.header('Content-Range')}",
                                             response.status, response.text, response.headers)
                if confirmed > length:
                    raise UploadSessionError(f"server acknowledged {confirmed} bytes of a {length} byte chunk",
                                             response.status, response.text, response.headers)
                self._advance(confirmed)
                logger.debug("chunk %s: %d/%d", request.header('Content-Range'), self._progress, self._total)
                return False
            check_response(response)
        except GoogleApiError:
            self._fail()
            raise
        self._complete(response)
        return True

    def query_status(self, cancel: CancelSignal|None = None,
                     timeout: float|None = None) -> int:
        """
        Ask the server how much of the media it has committed and move the
        cursor there.  Returns the cursor; if the server reports the upload
        as already finished the upload completes with that response.
        """
        self._require(UploadState.CHUNK_UPLOADING)
        request = HttpRequest('PUT', self._session_uri,
                              (('Content-Range', f"bytes */{self._total}"),), b"")
        try:
            response = self._transport.send(request, cancel, timeout)
            if response.status == RESUME_INCOMPLETE:
                committed = self._committed(response)
                if committed < self._progress:
                    raise UploadSessionError(f"server committed {committed} bytes, "
                                             f"{self._progress} were already acknowledged",
                                             response.status, response.text, response.headers)
                self._advance(committed - self._progress)
                return self._progress
            check_response(response)
        except GoogleApiError:
            self._fail()
            raise
        self._complete(response)
        return self._progress

    def upload(self, cancel: CancelSignal|None = None,
               timeout: float|None = None) -> Any:
        """
        Upload chunks until the server reports completion and return the
        decoded resource.  The cancel signal aborts whichever request is in
        flight and no further chunk is sent; what the server already
        acknowledged stays with the server-side session.
        """
        while not self.transfer_chunk(cancel, timeout):
            pass
        return self._result

    def run(self, request: HttpRequest,
            cancel: CancelSignal|None = None,
            timeout: float|None = None) -> Any:
        """initiate() then upload()."""
        self.initiate(request, cancel, timeout)
        return self.upload(cancel, timeout)


def simple_upload_request(request: HttpRequest, media: MediaUpload, media_type: str) -> HttpRequest:
    """uploadType=media: the request body is the media and nothing else."""
    headers = request.headers + (('Content-Type', media_type),)
    return replace(request, headers=headers, body=read_all(media))

def multipart_upload_request(request: HttpRequest, media: MediaUpload, media_type: str) -> HttpRequest:
    """
    uploadType=multipart: a multipart/related body with the JSON metadata
    as the first part and the media as the second.
    """
    boundary = f"==============={uuid.uuid4().hex}=="
    delimiter = f"--{boundary}\r\n".encode('ascii')
    body = b"".join([
        delimiter,
        b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
        request.body or b"{}",
        b"\r\n",
        delimiter,
        f"Content-Type: {media_type}\r\n\r\n".encode('ascii'),
        read_all(media),
        f"\r\n--{boundary}--".encode('ascii'),
    ])
    headers = tuple((k, v) for k, v in request.headers if k.lower() != 'content-type')
    headers += (('Content-Type', f'multipart/related; boundary="{boundary}"'),)
    return replace(request, headers=headers, body=body)
