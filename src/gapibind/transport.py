"""
One HTTP exchange per call over an injected client.
The client is anything with the requests.Session.request() signature,
normally a google.auth AuthorizedSession so credentials never pass through
here.  Nothing is retried: a request either produces a response or an
exception that goes back to the caller.
"""
from concurrent import futures
from dataclasses import dataclass, field
from typing import Any, Protocol
import json
import logging

import requests
from requests.structures import CaseInsensitiveDict

from . import USER_AGENT
from .errors import (CancelledError, CompositionError, ConfigurationError,
                     DecodeError, ErrorPayload, ProtocolError, TransportError)
from .resources import ApiResourceBase

logger = logging.getLogger(__name__)

# bytes pulled off the socket between cancellation checks
_READ_CHUNK = 64 * 1024
# seconds between cancellation checks while waiting for the response
_CANCEL_POLL = 0.05

class CancelSignal(Protocol):
    """threading.Event satisfies this."""
    def is_set(self) -> bool: ...

@dataclass(frozen=True)
class HttpRequest():
    """Immutable snapshot of a request, taken when a call executes."""
    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = field(default=())
    body: bytes|None = field(default=None)

    def header(self, name: str) -> str|None:
        n = name.lower()
        for k, v in self.headers:
            if k.lower() == n:
                return v
        return None

@dataclass(frozen=True, eq=False)
class HttpResponse():
    """Fully read response.  Header lookup is case insensitive."""
    status: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = field(default=b"")

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')

def user_agent(suffix: str|None = None) -> str:
    """Library identifier plus the optional caller supplied fragment."""
    if not suffix:
        return USER_AGENT
    return f"{USER_AGENT} {suffix}"

def json_body(payload: ApiResourceBase|dict|None) -> bytes|None:
    """Encode a request payload, None for calls without one."""
    if payload is None:
        return None
    try:
        base = payload.to_base() if isinstance(payload, ApiResourceBase) else dict(payload)
        return json.dumps(base, ensure_ascii=False).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise CompositionError(f"cannot encode request body: {e}") from e

def _cancelled(cancel: CancelSignal|None) -> bool:
    return cancel is not None and cancel.is_set()

def _discard(pending: futures.Future) -> None:
    """Close the response of a request nobody waits for anymore."""
    if pending.cancelled() or pending.exception() is not None:
        return
    pending.result().close()

class Transport():
    """
    Shared by every call a service makes.  The wrapped client is only read
    from, so one Transport can serve concurrent calls as far as the client
    itself allows.
    """
    def __init__(self, client: Any, user_agent_suffix: str|None = None) -> None:
        if client is None:
            raise ConfigurationError("HTTP client is None")
        if not callable(getattr(client, 'request', None)):
            raise ConfigurationError(f"HTTP client {client!r} has no request() method")
        self._client = client
        self.user_agent_suffix = user_agent_suffix

    @property
    def client(self) -> Any:
        return self._client

    @property
    def user_agent(self) -> str:
        return user_agent(self.user_agent_suffix)

    def _request(self, request: HttpRequest, headers: dict, timeout: float|None) -> requests.Response:
        try:
            return self._client.request(request.method, request.url,
                                        data=request.body, headers=headers,
                                        stream=True, timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url}: {e}") from e

    def _request_cancellable(self, request: HttpRequest, headers: dict,
                             cancel: CancelSignal,
                             timeout: float|None) -> requests.Response:
        """
        The client call runs on a worker thread while this one watches the
        cancel signal, so a server that never answers can still be
        abandoned.  An abandoned response is closed whenever it turns up.
        """
        executor = futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="gapibind-send")
        try:
            pending = executor.submit(self._request, request, headers, timeout)
            while True:
                done, _ = futures.wait([pending], timeout=_CANCEL_POLL)
                if done:
                    return pending.result()
                if _cancelled(cancel):
                    pending.add_done_callback(_discard)
                    raise CancelledError(f"{request.method} {request.url} cancelled awaiting response")
        finally:
            executor.shutdown(wait=False)

    def send(self, request: HttpRequest,
             cancel: CancelSignal|None = None,
             timeout: float|None = None) -> HttpResponse:
        """
        Perform exactly one request.  The cancel signal is honoured while
        waiting for the response and between reads of the streamed body; it
        is also checked before sending.  timeout is handed to the client as
        is, without one a hung server blocks until cancelled.
        """
        if _cancelled(cancel):
            raise CancelledError(f"{request.method} {request.url} cancelled before sending")
        headers = {k: v for k, v in request.headers}
        headers['User-Agent'] = self.user_agent
        logger.debug("%s %s", request.method, request.url)
        if cancel is None:
            response = self._request(request, headers, timeout)
        else:
            response = self._request_cancellable(request, headers, cancel, timeout)
        try:
            chunks = []
            if not _cancelled(cancel):
                for chunk in response.iter_content(chunk_size=_READ_CHUNK):
                    if _cancelled(cancel):
                        break
                    chunks.append(chunk)
            if _cancelled(cancel):
                raise CancelledError(f"{request.method} {request.url} cancelled in flight")
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url}: {e}") from e
        finally:
            response.close()
        logger.debug("%s %s -> %d", request.method, request.url, response.status_code)
        return HttpResponse(status=response.status_code,
                            headers=CaseInsensitiveDict(response.headers),
                            body=b"".join(chunks))

def check_response(response: HttpResponse) -> HttpResponse:
    """Raise a ProtocolError for anything that isn't 2xx."""
    if response.ok:
        return response
    raise ProtocolError(response.status,
                        ErrorPayload.parse(response.body),
                        response.text,
                        response.headers)

def decode_response(response: HttpResponse, result_type: type|None) -> Any:
    """
    Decode a 2xx body into result_type.  Operations that declare no result
    type get None and their body is never parsed, so an empty 204 or 200
    is fine for them.
    """
    if result_type is None:
        return None
    if not response.body.strip():
        raise DecodeError(f"empty response body, expected {result_type.__name__}")
    try:
        doc = json.loads(response.body)
    except ValueError as e:
        raise DecodeError(f"malformed JSON response: {e}") from e
    if issubclass(result_type, ApiResourceBase):
        return result_type.from_base(doc)
    if not isinstance(doc, result_type):
        raise DecodeError(f"expected {result_type.__name__}, got {type(doc).__name__}")
    return doc
