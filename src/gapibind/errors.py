"""
Exception types raised by the bindings.
Nothing here is retried or logged by the library, every error goes straight
back to whoever executed the call.
"""
from dataclasses import dataclass, field
from typing import List
import json


class GoogleApiError(Exception):
    """Base for everything the bindings raise."""
    pass


class ConfigurationError(GoogleApiError):
    """Invalid construction, e.g. no HTTP client.  Raised before any network activity."""
    pass


class CompositionError(GoogleApiError):
    """Request could not be assembled: bad URL template values, unknown params, unencodable body."""
    pass


class TransportError(GoogleApiError):
    """
    The HTTP exchange did not complete.  The underlying requests exception
    (if there was one) is chained as __cause__.
    """
    pass


class CancelledError(TransportError):
    """The caller's cancellation signal fired while the request was in flight."""
    pass


class DecodeError(GoogleApiError):
    """A 2xx response body did not match the expected JSON shape."""
    pass


@dataclass
class ErrorItem():
    """
    One entry of the 'errors' list in a server error document.
    """
    reason: str = field(default="")
    message: str = field(default="")
    domain: str = field(default="")
    location: str = field(default="")
    locationType: str = field(default="")


@dataclass
class ErrorPayload():
    """
    The structured body Google APIs return on failure:
    {"error": {"code": 404, "message": "...", "errors": [{...}]}}
    """
    code: int = field(default=0)
    message: str = field(default="")
    errors: List[ErrorItem] = field(default_factory=list)
    status: str = field(default="")

    @staticmethod
    def parse(body: bytes|str) -> "ErrorPayload|None":
        """Parse an error document, None if body isn't one."""
        try:
            doc = json.loads(body)
        except (ValueError, TypeError):
            return None
        if not isinstance(doc, dict) or not isinstance(doc.get('error'), dict):
            return None
        err = doc['error']
        items = []
        for e in err.get('errors', []) or []:
            if isinstance(e, dict):
                items.append(ErrorItem(**{k: str(v) for k, v in e.items()
                                          if k in ErrorItem.__dataclass_fields__}))
        code = err.get('code', 0)
        return ErrorPayload(code=code if isinstance(code, int) else 0,
                            message=str(err.get('message', "")),
                            errors=items,
                            status=str(err.get('status', "")))


class ProtocolError(GoogleApiError):
    """
    Server answered with a non-2xx status.
    status_code is always populated, payload only when the body was a
    parseable error document.
    """
    def __init__(self, status_code: int,
                 payload: ErrorPayload|None = None,
                 body: str = "",
                 headers: dict|None = None) -> None:
        self.status_code = status_code
        self.payload = payload
        self.body = body
        self.headers = dict(headers) if headers else {}
        super().__init__(self._describe())

    @property
    def message(self) -> str:
        return self.payload.message if self.payload else ""

    @property
    def errors(self) -> List[ErrorItem]:
        return self.payload.errors if self.payload else []

    def _describe(self) -> str:
        if not self.errors and not self.message:
            return f"got HTTP response code {self.status_code} with body: {self.body}"
        s = f"Error {self.status_code}: {self.message}".strip()
        if not self.errors:
            return s
        if len(self.errors) == 1 and self.errors[0].message == self.message:
            return f"{s}, {self.errors[0].reason}"
        details = "\n".join(f"Reason: {e.reason}, Message: {e.message}" for e in self.errors)
        return f"{s}\nMore details:\n{details}"


class UploadSessionError(ProtocolError):
    """
    The resumable upload protocol got a response it can't continue from,
    e.g. session creation succeeded but no Location header came back.
    """
    def __init__(self, reason: str, status_code: int = 0,
                 body: str = "", headers: dict|None = None) -> None:
        self.reason = reason
        super().__init__(status_code, None, body, headers)

    def _describe(self) -> str:
        return f"upload session error (HTTP {self.status_code}): {self.reason}"


def is_not_modified(err: BaseException) -> bool:
    """True if err is the 304 a conditional fetch produces when the entity tag matched."""
    return isinstance(err, ProtocolError) and err.status_code == 304
