"""
Python bindings for Google REST APIs, currently Fitness v1 and Maps Engine v1.

The per-method bindings aren't hand written.  Each API is a table of
method descriptions (verb, path template, parameters, body and response
types) and one generic request builder serves all of them: compose the
URL, attach query parameters and an optional JSON body, make one HTTP
request, decode one JSON response.  Resources are Python dataclasses and
most of the logic is translating between those and the raw dicts.

The hand written parts are the builder (call), URL composition (uri),
the transport and decoding (transport) and the resumable media upload
protocol (upload).  Credentials are not handled here at all beyond
access.py handing out services built on an authorized requests session,
any requests.Session compatible client can be injected instead.
"""

__version__ = "0.1.0"

# identifies the library in every request's User-Agent
USER_AGENT = f"gapibind/{__version__}"
