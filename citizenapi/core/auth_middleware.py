import logging
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt

from citizenapi.config import settings
from citizenapi.core.exceptions import AuthenticationError
from citizenapi.core.rbac import resolve_role
from citizenapi.schemas.user import CurrentUser

logger = logging.getLogger(__name__)

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def decode_identity_token(token: str) -> Dict[str, Any]:
    """외부 인증 공급자가 발급한 토큰 검증 후 클레임 반환"""
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"Rejected identity token: {str(e)}")
        raise AuthenticationError("Invalid token")


def identity_from_claims(claims: Dict[str, Any]) -> CurrentUser:
    """클레임 -> 현재 사용자 (user_id, login_id, role)"""
    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")

    login_id = (
        claims.get("email")
        or claims.get("cognito:username")
        or claims.get("username")
        or ""
    )
    return CurrentUser(
        user_id=str(user_id), login_id=str(login_id), role=resolve_role(claims)
    )


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CurrentUser]:
    """선택적 사용자 인증 - 토큰이 없거나 유효하지 않아도 None 반환"""
    if not credentials:
        return None
    try:
        return identity_from_claims(decode_identity_token(credentials.credentials))
    except AuthenticationError:
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """필수 사용자 인증 - 유효한 토큰이 필요함"""
    if not credentials:
        raise AuthenticationError("Authentication required")
    return identity_from_claims(decode_identity_token(credentials.credentials))
