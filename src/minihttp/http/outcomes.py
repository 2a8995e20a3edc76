"""
=============================================================================
ROUTE OUTCOMES
=============================================================================

The router first CLASSIFIES a request, then RENDERS the classification into
a response. The classification is one of these seven variants:

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ Variant                  │ Produced for                             │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │ Welcome()                │ GET /                                    │
    │ ServeStatic(path)        │ GET /static/<path>                       │
    │ SubmitJson(payload)      │ POST /submit, application/json           │
    │ SubmitForm(payload)      │ POST /submit, x-www-form-urlencoded      │
    │ UnsupportedMedia(type)   │ POST /submit, any other Content-Type     │
    │ NotFound(path)           │ GET or POST, nothing matched             │
    │ MethodNotAllowed(method) │ any other method                         │
    └──────────────────────────┴──────────────────────────────────────────┘

Each variant is its own frozen dataclass and RouteOutcome is their Union.
A type checker can then verify that code handling a RouteOutcome covers
every case, and the router's render table is keyed by these classes.

Outcomes carry only slices of the request (a path, a body, a method name),
never the request itself.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Welcome:
    """GET / : the fixed greeting."""


@dataclass(frozen=True)
class ServeStatic:
    """GET /static/<path> : path is relative to the static root."""
    path: str


@dataclass(frozen=True)
class SubmitJson:
    """Accepted JSON POST body, kept as raw bytes."""
    payload: bytes


@dataclass(frozen=True)
class SubmitForm:
    """Accepted form-encoded POST body, kept as raw bytes."""
    payload: bytes


@dataclass(frozen=True)
class UnsupportedMedia:
    """POST body with a media type we do not accept (None if absent)."""
    content_type: Optional[str]


@dataclass(frozen=True)
class NotFound:
    """GET or POST to a path no rule matched."""
    path: str


@dataclass(frozen=True)
class MethodNotAllowed:
    """Any method other than GET or POST."""
    method: str


RouteOutcome = Union[
    Welcome,
    ServeStatic,
    SubmitJson,
    SubmitForm,
    UnsupportedMedia,
    NotFound,
    MethodNotAllowed,
]

# Runtime view of the Union, for tests and the router's render table
OUTCOME_TYPES = RouteOutcome.__args__
