from dataclasses import dataclass, field
import json
import re

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from gapibind.fitness.service import FitnessService
from gapibind.mapsengine.service import MapsEngineService

SESSION_URI = "https://www.googleapis.com/upload/session/abc123"

def make_response(status: int, body: bytes|dict|list|str = b"", headers: dict|None = None) -> requests.Response:
    """A real requests.Response with the body already in memory."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body).encode('utf-8')
    elif isinstance(body, str):
        body = body.encode('utf-8')
    r = requests.Response()
    r.status_code = status
    r.headers = CaseInsensitiveDict(headers or {})
    r._content = body
    r._content_consumed = True
    return r

@dataclass
class RecordedRequest():
    method: str
    url: str
    data: bytes|None
    headers: dict
    timeout: float|None = field(default=None)

class FakeSession():
    """
    Stands in for requests.Session / AuthorizedSession.  Responses are
    either queued up front or produced by a handler called with each request.
    """
    def __init__(self, handler=None) -> None:
        self.handler = handler
        self.queued = []
        self.requests: list[RecordedRequest] = []
        self.on_request = None

    def queue(self, status: int, body: bytes|dict|list|str = b"", headers: dict|None = None) -> "FakeSession":
        self.queued.append(make_response(status, body, headers))
        return self

    def request(self, method, url, data=None, headers=None, stream=False, timeout=None, **kwargs):
        req = RecordedRequest(method, url, data, CaseInsensitiveDict(headers or {}), timeout)
        self.requests.append(req)
        if self.on_request is not None:
            self.on_request(req)
        if self.handler is not None:
            return self.handler(req)
        if not self.queued:
            raise AssertionError(f"unexpected request {method} {url}")
        return self.queued.pop(0)

_CONTENT_RANGE = re.compile(r"^bytes (?:\*|(?P<start>\d+)-(?P<end>\d+))/(?P<total>\d+)$")

class UploadServer():
    """
    Plays the resumable upload endpoint.  The initiating request gets a
    session URI back, chunks are appended to what the server holds and
    answered with 308 + Range until everything is there.
    ack(start, data) decides how many bytes of a chunk get committed.
    """
    def __init__(self, result: dict|None = None, ack=None, location: str|None = SESSION_URI) -> None:
        self.result = result if result is not None else {"id": "uploaded"}
        self.ack = ack
        self.location = location
        self.received = bytearray()
        self.initiations: list[RecordedRequest] = []
        self.chunks: list[RecordedRequest] = []

    def _incomplete(self):
        headers = {"Range": f"bytes=0-{len(self.received) - 1}"} if self.received else {}
        return make_response(308, b"", headers)

    def __call__(self, req: RecordedRequest):
        if "uploadType=resumable" in req.url:
            self.initiations.append(req)
            headers = {"Location": self.location} if self.location else {}
            return make_response(200, b"", headers)
        assert(req.url == self.location)
        assert(req.method == "PUT")
        self.chunks.append(req)
        m = _CONTENT_RANGE.match(req.headers["Content-Range"])
        assert(m is not None)
        total = int(m.group('total'))
        if m.group('start') is not None:
            start = int(m.group('start'))
            assert(start == len(self.received))
            data = req.data
            assert(len(data) == int(m.group('end')) - start + 1)
            n = self.ack(start, data) if self.ack else len(data)
            self.received += data[:n]
        if len(self.received) == total:
            return make_response(200, self.result, {"ETag": "final"})
        return self._incomplete()

@pytest.fixture
def session():
    return FakeSession()

@pytest.fixture
def fitness(session):
    return FitnessService(session)

@pytest.fixture
def mapsengine(session):
    return MapsEngineService(session)
