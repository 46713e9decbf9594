from jose import jwt

from app.core.config import get_settings


def decode_access_token(token: str) -> dict:
    """Decode a bearer token issued for a front-desk operator.

    Raises ``jose.JWTError`` when the signature or expiry is invalid.
    """
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])
