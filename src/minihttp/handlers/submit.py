"""
=============================================================================
POST /submit HANDLER
=============================================================================

Accepts a POST body according to its declared Content-Type and echoes it
back.

=============================================================================
CONTENT TYPES
=============================================================================

Only the media type TOKEN counts; parameters are ignored and matching is
case-insensitive:

    Content-Type: application/json                   → JSON
    Content-Type: Application/JSON; charset=utf-8    → JSON
    Content-Type: application/x-www-form-urlencoded  → form
    Content-Type: text/xml                           → 415
    (no Content-Type)                                → 415 "... none"

=============================================================================
PASS-THROUGH, NOT PARSING
=============================================================================

The body is never decoded. JSON is not validated, form fields are not split
into key/value pairs. The response echoes the exact bytes received:

    POST /submit HTTP/1.1
    Content-Type: application/json

    {"key":"value"}

        ↓

    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 30

    Received JSON: {"key":"value"}

Nothing downstream needs structured fields, so there is no form grammar
to maintain.

=============================================================================
"""

import logging
from typing import Union

from ..http.outcomes import SubmitForm, SubmitJson, UnsupportedMedia
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, unsupported_media_type


logger = logging.getLogger(__name__)


JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

SubmitOutcome = Union[SubmitJson, SubmitForm, UnsupportedMedia]


def classify(request: HTTPRequest) -> SubmitOutcome:
    """
    Decide how a POST body will be treated, from its media type alone.
    """
    media_type = request.content_type
    payload = request.body or b""

    if media_type == JSON_MEDIA_TYPE:
        return SubmitJson(payload)
    if media_type == FORM_MEDIA_TYPE:
        return SubmitForm(payload)
    return UnsupportedMedia(media_type)


def render(outcome: SubmitOutcome) -> HTTPResponse:
    """Turn a submit classification into its response."""
    if isinstance(outcome, SubmitJson):
        logger.info(f"Received JSON payload ({len(outcome.payload)} bytes)")
        return ok(b"Received JSON: " + outcome.payload)

    if isinstance(outcome, SubmitForm):
        logger.info(f"Received form-encoded payload ({len(outcome.payload)} bytes)")
        return ok(b"Received form data: " + outcome.payload)

    rejected = outcome.content_type or "none"
    logger.warning(f"Unsupported Content-Type: {rejected}")
    return unsupported_media_type(f"415 Unsupported Media Type: {rejected}")


def handle(request: HTTPRequest) -> HTTPResponse:
    """
    Handle POST /submit.

    Returns:
        200 echoing the body for JSON or form data, 415 otherwise.
    """
    return render(classify(request))
