# This project was developed with assistance from AI tools.
"""Seller contact masking for investor responses.

Investors browse deals but must not see how to reach the seller directly.
When the authenticated user's data scope has ``pii_mask=True`` the middleware
rewrites seller phone and email fields in every JSON response body.

The ``request.state.pii_mask`` flag is set by ``get_current_user`` in
``middleware/auth.py``.
"""

import json
import logging
import re
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def mask_phone(value: str | None) -> str | None:
    """Mask phone to ***-***-1234 (last 4 visible)."""
    if value is None:
        return None
    digits = re.sub(r"\D", "", value)
    if len(digits) >= 4:
        return f"***-***-{digits[-4:]}"
    return "***-***-****"


def mask_email(value: str | None) -> str | None:
    """Mask the local part: jane.doe@example.com -> j***@example.com."""
    if value is None:
        return None
    local, sep, domain = value.partition("@")
    if not sep or not local:
        return "***"
    return f"{local[0]}***@{domain}"


_PII_FIELD_MASKERS: dict[str, Any] = {
    "seller_phone": mask_phone,
    "seller_email": mask_email,
}


def mask_pii(obj: Any) -> Any:
    """Walk a JSON-compatible structure and mask known seller contact fields."""
    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            masker = _PII_FIELD_MASKERS.get(key)
            if masker and isinstance(value, str | None):
                result[key] = masker(value)
            else:
                result[key] = mask_pii(value)
        return result
    if isinstance(obj, list):
        return [mask_pii(item) for item in obj]
    return obj


class PIIMaskingMiddleware(BaseHTTPMiddleware):
    """Intercept JSON responses and mask seller contact when ``request.state.pii_mask`` is set."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        if not getattr(request.state, "pii_mask", False):
            return response

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        body_bytes = b""
        async for chunk in response.body_iterator:
            body_bytes += chunk.encode("utf-8") if isinstance(chunk, str) else chunk

        try:
            new_body = json.dumps(mask_pii(json.loads(body_bytes))).encode("utf-8")
        except (json.JSONDecodeError, TypeError):
            logger.warning("PII mask skipped: response body is not valid JSON (%s)", request.url.path)
            new_body = body_bytes

        headers = dict(response.headers)
        headers.pop("content-length", None)
        return Response(
            content=new_body,
            status_code=response.status_code,
            headers=headers,
            media_type=response.media_type,
        )
