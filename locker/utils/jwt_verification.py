import jwt
from typing import Dict, Any
from locker.configs.settings import settings
from locker.core.exceptions import AppError
from starlette.status import HTTP_401_UNAUTHORIZED


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify an access token issued by the auth platform"""
    if not settings.AUTH_JWT_SECRET:
        raise AppError("Authentication is not configured", status_code=HTTP_401_UNAUTHORIZED, code="auth_not_configured")

    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            issuer=settings.AUTH_JWT_ISSUER,
            audience=settings.AUTH_JWT_AUDIENCE,
            options={
                "verify_aud": settings.AUTH_JWT_AUDIENCE is not None,
                "verify_iss": settings.AUTH_JWT_ISSUER is not None,
                "require": ["sub", "exp"],
            },
        )
        return payload

    except jwt.ExpiredSignatureError:
        raise AppError("Token has expired", status_code=HTTP_401_UNAUTHORIZED, code="token_expired")
    except jwt.InvalidTokenError as e:
        raise AppError(f"Invalid token: {str(e)}",
                       status_code=HTTP_401_UNAUTHORIZED, code="invalid_token")
