from dataclasses import dataclass
from typing import Any, Dict

from fastapi import Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from starlette.status import HTTP_401_UNAUTHORIZED

from locker.configs.settings import settings
from locker.core.exceptions import AppError
from locker.utils.jwt_verification import decode_token

security = HTTPBearer()


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    claims: Dict[str, Any]

    @property
    def private_unlocked(self) -> bool:
        """True once the auth platform has stepped the session up with a biometric check."""
        return self.claims.get("aal") == settings.AUTH_PRIVATE_AAL


async def verify_token(authorization_credentials: HTTPAuthorizationCredentials = Security(security)) -> CurrentUser:
    """Verify the bearer token and return the calling user"""
    payload = decode_token(authorization_credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise AppError("Token has no subject", status_code=HTTP_401_UNAUTHORIZED, code="invalid_token")
    return CurrentUser(user_id=str(user_id), claims=payload)
