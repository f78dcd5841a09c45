# sectionshot/auth.py
import secrets
from typing import Optional

from fastapi import Request, Security
from fastapi.security import APIKeyHeader

from sectionshot.errors import AuthError
from sectionshot.logger import get_logger

logger = get_logger("sectionshot.auth")

API_KEY_HEADER = "x-api-key"
api_key_header_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


class AccessGate:
    """Shared-secret check in front of the capture endpoint."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("AccessGate requires a non-empty secret")
        self._secret = secret.encode("utf-8")

    def permits(self, key: Optional[str]) -> bool:
        if not key:
            return False
        # constant-time comparison
        return secrets.compare_digest(key.encode("utf-8"), self._secret)

    def check(self, key: Optional[str]) -> None:
        if not self.permits(key):
            raise AuthError()


async def require_api_key(request: Request, api_key: Optional[str] = Security(api_key_header_scheme)):
    """FastAPI dependency: reject the request unless x-api-key matches. No-op when the gate is disabled."""
    gate = request.app.state.access_gate
    if gate is None:
        return None
    try:
        gate.check(api_key)
    except AuthError:
        logger.warning(
            f"Rejected {request.method} {request.url.path}: "
            f"{'missing' if not api_key else 'invalid'} API key"
        )
        raise
    return api_key
