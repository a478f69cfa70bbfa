"""Helpers shared by API resources."""

from datetime import datetime
from uuid import UUID

import falcon
import falcon.asgi

from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects import Subject


def current_subject(req: falcon.asgi.Request, resp: falcon.asgi.Response) -> Subject | None:
    """Authenticated subject, or None after writing a 401 response."""
    subject = getattr(req.context, "subject", None)
    if not subject:
        resp.status = falcon.HTTP_401
        resp.media = {"error": "Unauthorized"}
        return None
    return subject


def parse_uuid(value: str, field: str) -> UUID:
    try:
        return UUID(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}") from e


def parse_datetime(value: str | None, field: str) -> datetime | None:
    """ISO 8601 timestamp or None."""
    if value in (None, ""):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as e:
        raise ValidationError(f"{field} must be an ISO 8601 timestamp") from e


async def read_body(req: falcon.asgi.Request) -> dict:
    """JSON object body, ValidationError otherwise."""
    try:
        body = await req.get_media()
    except falcon.MediaNotFoundError:
        body = {}
    except falcon.MediaMalformedError as e:
        raise ValidationError("Malformed JSON body") from e
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body
