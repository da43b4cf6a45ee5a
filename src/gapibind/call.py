"""
Request builders driven by a method table.

Rather than one hand written class per API method, each API declares its
methods as MethodSpec entries (what a discovery document says about them:
verb, path template, parameters, body and response types, media upload
support) and ApiService turns the table into attribute chains:

    fitness.users.sessions.list("me", startTime=...).fields("session/id").execute()

Every such call returns an ApiCall.  Required path parameters and the body
are positional (or named), optional query parameters can be passed as
keyword arguments or set with set()/fields()/if_none_match() afterwards.
Setters return the same ApiCall so they chain, setting something twice
keeps the last value.  execute() takes an immutable HttpRequest snapshot of
the builder, so changing the builder afterwards never touches a request
already sent, and executing again sends a new independent request.
"""
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Self
from fnmatch import fnmatch
import copy

from googleapiclient.http import MediaUpload

from .errors import CompositionError
from .media import MediaSource, determine_media_type, media_size, media_upload, round_chunk_size
from .resources import ApiResourceBase
from .transport import (CancelSignal, HttpRequest, Transport, check_response,
                        decode_response, json_body)
from .upload import ProgressCallback, ResumableUpload, multipart_upload_request, simple_upload_request
from .uri import compose_url

@dataclass(frozen=True)
class QueryParam():
    """
    A query parameter a method accepts.
    repeated:     a list value is sent as one occurrence per element
    comma_joined: a list value is joined with ',' into a single occurrence
    required:     the call can't be composed without it
    """
    repeated: bool = field(default=False)
    comma_joined: bool = field(default=False)
    required: bool = field(default=False)

@dataclass(frozen=True)
class MediaUploadSpec():
    """Upload support of a method, the upload path is root relative ('/upload/...')."""
    path: str
    protocols: tuple[str, ...] = field(default=("simple", "resumable"))
    accept: tuple[str, ...] = field(default=("*/*",))
    max_size: int|None = field(default=None)

@dataclass(frozen=True)
class MethodSpec():
    """One entry of an API's method table."""
    id: str
    http_method: str
    path: str
    parameter_order: tuple[str, ...] = field(default=())
    query: Mapping[str, QueryParam] = field(default_factory=dict)
    request: type|None = field(default=None)
    response: type|None = field(default=None)
    media_upload: MediaUploadSpec|None = field(default=None)

    @property
    def name(self) -> str:
        return self.id.rsplit('.', 1)[-1]

    @property
    def supports_paging(self) -> bool:
        return 'pageToken' in self.query

# parameters every Google API method accepts
STANDARD_PARAMETERS = {
    "fields": QueryParam(),
    "key": QueryParam(),
    "quotaUser": QueryParam(),
    "userIp": QueryParam(),
    "prettyPrint": QueryParam(),
}

@dataclass(frozen=True)
class _MediaOptions():
    source: MediaSource
    media_type: str|None = None
    resumable: bool = False
    chunk_size: int|None = None

class ApiCall():
    """
    Builder for a single invocation of one method.  Owned by one call
    site, don't share a builder between threads.
    """
    def __init__(self, service: "ApiService", method: MethodSpec, *args, **kwargs) -> None:
        self._service = service
        self._method = method
        self._path: dict[str, Any] = {}
        self._body: ApiResourceBase|dict|None = None
        self._params: dict[str, Any] = {}
        self._headers: dict[str, str] = {}
        self._media: _MediaOptions|None = None
        self._progress: ProgressCallback|None = None

        positional = list(method.parameter_order)
        if method.request is not None:
            positional.append('body')
        if len(args) > len(positional):
            raise TypeError(f"{method.id} takes {len(positional)} positional arguments, got {len(args)}")
        values = dict(zip(positional, args))
        for name in positional[len(args):]:
            if name in kwargs:
                values[name] = kwargs.pop(name)
        missing = [p for p in positional if p not in values]
        if missing:
            raise TypeError(f"{method.id} missing required argument(s): {', '.join(missing)}")
        self._body = values.pop('body', None)
        if method.request is not None and self._body is None:
            raise TypeError(f"{method.id} requires a {method.request.__name__} body")
        self._path = values
        for k, v in kwargs.items():
            self.set(k, v)

    def __str__(self) -> str:
        return f"{self._method.id}({', '.join(str(v) for v in self._path.values())})"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @property
    def method(self) -> MethodSpec:
        return self._method

    @property
    def params(self) -> dict[str, Any]:
        """Copy of the optional parameters set so far."""
        return dict(self._params)

    def copy(self) -> Self:
        c = copy.copy(self)
        c._params = dict(self._params)
        c._headers = dict(self._headers)
        return c

    def set(self, name: str, value: Any) -> Self:
        """
        Set optional query parameter name.  None unsets it.
        Unknown names are rejected here rather than silently sent.
        """
        spec = self._method.query.get(name, STANDARD_PARAMETERS.get(name, None))
        if spec is None:
            raise CompositionError(f"{self._method.id} has no parameter {name!r}")
        if value is None:
            self._params.pop(name, None)
            return self
        if isinstance(value, (list, tuple, set)):
            if spec.comma_joined:
                value = ",".join(str(v) for v in value)
            elif spec.repeated:
                value = list(value)
            else:
                raise CompositionError(f"{self._method.id} parameter {name!r} takes a single value")
        self._params[name] = value
        return self

    def fields(self, *fields: str) -> Self:
        """
        Partial response, only the named fields come back, e.g.
        fields("nextPageToken", "items(id,updated)").
        """
        return self.set("fields", ",".join(fields) if fields else None)

    def if_none_match(self, entity_tag: str) -> Self:
        """
        Conditional fetch.  If the resource's ETag still matches the server
        answers 304 and execute() raises a ProtocolError for which
        errors.is_not_modified() is true.
        """
        return self.header('If-None-Match', entity_tag)

    def header(self, name: str, value: str|None) -> Self:
        """Extra request header, None removes it."""
        if value is None:
            self._headers.pop(name, None)
        else:
            self._headers[name] = str(value)
        return self

    def _require_media(self, protocol: str) -> MediaUploadSpec:
        mu = self._method.media_upload
        if mu is None:
            raise CompositionError(f"{self._method.id} does not support media upload")
        if protocol not in mu.protocols:
            raise CompositionError(f"{self._method.id} does not support {protocol} upload")
        return mu

    def media(self, source: MediaSource, media_type: str|None = None) -> Self:
        """
        Upload source in the same request as the call.  With a body this is
        a multipart upload, without one a plain media upload.
        """
        self._require_media("simple")
        self._media = _MediaOptions(source, media_type)
        return self

    def resumable_media(self, source: MediaSource,
                        media_type: str|None = None,
                        chunk_size: int|None = None) -> Self:
        """
        Upload source with the resumable protocol.  chunk_size is rounded
        up to a multiple of 256KB.  media_type is sniffed when not given.
        """
        self._require_media("resumable")
        cs = round_chunk_size(chunk_size) if chunk_size else None
        self._media = _MediaOptions(source, media_type, True, cs)
        return self

    def progress_updater(self, callback: ProgressCallback|None) -> Self:
        """
        Called with the acknowledged byte count after every chunk of a
        resumable upload.  Should be quick, failures in it are ignored.
        """
        self._progress = callback
        return self

    def _check_media(self, mu: MediaUpload) -> str:
        """
        Settle the media type, then check it and the size against what the
        method accepts.  Done before any request is sent.
        """
        mt = determine_media_type(mu, self._media.media_type)
        spec = self._method.media_upload
        if spec.max_size is not None and media_size(mu) > spec.max_size:
            raise CompositionError(f"{self._method.id} accepts media up to {spec.max_size} bytes, "
                                   f"got {media_size(mu)}")
        base_type = mt.split(";", 1)[0].strip().lower()
        if not any(fnmatch(base_type, a.lower()) for a in spec.accept):
            raise CompositionError(f"{self._method.id} does not accept {mt} media")
        return mt

    def _upload_type(self) -> str|None:
        if self._media is None:
            return None
        if self._media.resumable:
            return "resumable"
        return "multipart" if self._body is not None else "media"

    def build_request(self) -> HttpRequest:
        """Immutable request for the current builder state, nothing is sent."""
        for name, spec in self._method.query.items():
            if spec.required and name not in self._params:
                raise CompositionError(f"{self._method.id} requires parameter {name!r}")
        query = {"alt": "json"}
        query.update(self._params)
        template = self._method.path
        upload_type = self._upload_type()
        if upload_type:
            template = self._method.media_upload.path
            query["uploadType"] = upload_type
        url = compose_url(self._service.base_path, template, self._path, query)
        headers = dict(self._headers)
        body = json_body(self._body)
        if body is not None:
            headers['Content-Type'] = "application/json; charset=UTF-8"
        return HttpRequest(self._method.http_method, url, tuple(headers.items()), body)

    def execute_with_headers(self, cancel: CancelSignal|None = None,
                             timeout: float|None = None) -> tuple[Any, Mapping[str, str]]:
        """
        execute() that also hands back the response headers, e.g. for the
        ETag to use with a later if_none_match().
        """
        request = self.build_request()
        transport = self._service.transport
        if self._media is None:
            response = check_response(transport.send(request, cancel, timeout))
            return decode_response(response, self._method.response), response.headers
        with media_upload(self._media.source) as mu:
            mt = self._check_media(mu)
            if self._media.resumable:
                rx = ResumableUpload(transport, mu,
                                     media_type=mt,
                                     chunk_size=self._media.chunk_size,
                                     progress_callback=self._progress,
                                     result_type=self._method.response)
                result = rx.run(request, cancel, timeout)
                return result, rx.response_headers
            if self._body is not None:
                request = multipart_upload_request(request, mu, mt)
            else:
                request = simple_upload_request(request, mu, mt)
        response = check_response(transport.send(request, cancel, timeout))
        return decode_response(response, self._method.response), response.headers

    def execute(self, cancel: CancelSignal|None = None,
                timeout: float|None = None) -> Any:
        """
        Perform the call: one HTTP request, or a resumable upload session.
        cancel is a threading.Event (or anything with is_set()) that aborts
        the request in flight, timeout is seconds passed to the HTTP client.
        Returns the decoded response resource, None for methods without one.
        """
        result, _ = self.execute_with_headers(cancel, timeout)
        return result

    def pages(self, cancel: CancelSignal|None = None,
              timeout: float|None = None) -> Iterator[Any]:
        """
        Execute repeatedly following nextPageToken, yielding each response.
        Works on a copy so this builder's pageToken is left alone.
        """
        if not self._method.supports_paging:
            raise CompositionError(f"{self._method.id} is not a paged method")
        call = self.copy()
        while True:
            page = call.execute(cancel, timeout)
            yield page
            token = (page.get('nextPageToken', None) if isinstance(page, dict)
                     else getattr(page, 'nextPageToken', None))
            if not token:
                break
            call.set('pageToken', token)


class ApiResource():
    """
    A node of the resource tree ('users', 'users.dataSources', ...).
    Attribute access gives child resources and method factories.
    """
    def __init__(self, service: "ApiService", path: str) -> None:
        self._service = service
        self._path = path
        self._children: dict[str, ApiResource] = {}
        self._methods: dict[str, MethodSpec] = {}

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{self._path}"

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._children) | set(self._methods))

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        if name in self._children:
            return self._children[name]
        if name in self._methods:
            return partial(ApiCall, self._service, self._methods[name])
        raise AttributeError(f"{self._path} has no resource or method {name!r}")

    def _child(self, name: str) -> "ApiResource":
        if name not in self._children:
            prefix = f"{self._path}." if self._path else ""
            self._children[name] = ApiResource(self._service, prefix + name)
        return self._children[name]


class ApiService(ApiResource):
    """
    Base for an API binding.  Subclasses provide the API name, base path
    and method table, this wires them onto a Transport over the injected
    HTTP client.
    """
    api_name: str = ""
    api_version: str = ""
    root_url: str = "https://www.googleapis.com/"
    service_path: str = ""
    methods: tuple[MethodSpec, ...] = ()

    def __init__(self, client: Any,
                 base_path: str|None = None,
                 root_url: str|None = None,
                 user_agent: str|None = None) -> None:
        """
        base_path replaces root_url + service_path outright, root_url only
        moves the API to another host (upload paths follow it).
        user_agent is appended to the library's own User-Agent.
        """
        super().__init__(self, "")
        self.transport = Transport(client, user_agent)
        if root_url and not root_url.endswith("/"):
            root_url += "/"
        self.base_path = base_path or (root_url or self.root_url) + self.service_path
        self._table: dict[str, MethodSpec] = {}
        prefix = f"{self.api_name}."
        for m in self.methods:
            key = m.id[len(prefix):] if m.id.startswith(prefix) else m.id
            self._table[key] = m
            *resources, name = key.split('.')
            node: ApiResource = self
            for r in resources:
                node = node._child(r)
            node._methods[name] = m

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{self.api_name}:{self.api_version}<{self.base_path}>"

    @property
    def user_agent(self) -> str:
        return self.transport.user_agent

    def method(self, operation: str) -> MethodSpec:
        """Method table lookup by operation name, with or without the API prefix."""
        prefix = f"{self.api_name}."
        key = operation[len(prefix):] if operation.startswith(prefix) else operation
        try:
            return self._table[key]
        except KeyError:
            raise CompositionError(f"{self.api_name} has no operation {operation!r}") from None

    def call(self, operation: str, *args, **kwargs) -> ApiCall:
        """
        Builder for operation, e.g. call("users.sessions.list", "me").
        Same as going through the attribute chain.
        """
        return ApiCall(self, self.method(operation), *args, **kwargs)
