"""
URL composition: path template expansion plus query encoding.
Templates use the discovery document syntax, {name} for a single
percent-encoded segment and {+name} where reserved characters such as
'/' must pass through unchanged.
"""
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlencode, urljoin

from uritemplate import URITemplate

from .errors import CompositionError

def resolve_relative(base: str, path: str) -> str:
    """
    Resolve a method path against the API base path.
    A path starting with '/' replaces the base path entirely, which is how
    the '/upload/...' media paths are addressed.
    """
    return urljoin(base, path)

def expand_path(template: str, values: Mapping[str, Any]) -> str:
    """
    Substitute every placeholder in template.  Each placeholder needs
    exactly one value and each value needs a placeholder, anything else is
    a CompositionError rather than a URL with stray braces in it.
    """
    t = URITemplate(template)
    names = set(t.variable_names)
    missing = sorted(n for n in names if values.get(n, None) in (None, ""))
    if missing:
        raise CompositionError(f"no value for path parameter(s) {missing} in {template}")
    unused = sorted(set(values) - names)
    if unused:
        raise CompositionError(f"path parameter(s) {unused} not in template {template}")
    return t.expand({n: str(values[n]) for n in names})

def _query_value(v: Any) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)

def encode_query(params: Mapping[str, Any]) -> str:
    """
    Encode query parameters in lexicographic key order so the same
    parameters always produce the same URL.  A list or tuple value becomes
    one occurrence per element, None values are skipped.
    """
    pairs = []
    for k in sorted(params):
        v = params[k]
        if v is None:
            continue
        if isinstance(v, Iterable) and not isinstance(v, (str, bytes)):
            pairs.extend((k, _query_value(i)) for i in v)
        else:
            pairs.append((k, _query_value(v)))
    return urlencode(pairs)

def compose_url(base: str, template: str,
                path_values: Mapping[str, Any],
                query: Mapping[str, Any]|None = None) -> str:
    """Full request URL from base path, method path template, path values and query."""
    url = expand_path(resolve_relative(base, template), path_values)
    q = encode_query(query or {})
    return f"{url}?{q}" if q else url
