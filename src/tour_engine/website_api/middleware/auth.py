"""HMAC/shared-secret authentication middleware."""

import hmac
import hashlib
from fastapi import Request, HTTPException
from ..config import settings

DEFAULT_OWNER_ID = "default"


async def verify_signature(request: Request):
    """Validate requests using HMAC-SHA256 signature or shared secret.

    Header options (checked in order):
    1. X-Tour-Signature: HMAC-SHA256 of request body using TOUR_API_SECRET
    2. X-Tour-Secret: Direct match against TOUR_API_SECRET
    """
    body = await request.body()

    signature = request.headers.get("X-Tour-Signature")
    if signature:
        expected = hmac.new(
            settings.api_secret.encode(),
            body,
            hashlib.sha256,
        ).hexdigest()
        if hmac.compare_digest(signature, expected):
            return True

    secret = request.headers.get("X-Tour-Secret")
    if secret and hmac.compare_digest(secret, settings.api_secret):
        return True

    raise HTTPException(
        status_code=401,
        detail={"success": False, "error": "auth_error", "detail": "Invalid or missing authentication"},
    )


async def get_owner_id(request: Request) -> str:
    """Account that owns the tours in this request."""
    return request.headers.get("X-Account-ID", "").strip() or DEFAULT_OWNER_ID
