# ============================================================================
# FILE: app/api/dependencies.py
# Request-scoped dependencies: app context, DB session, JWT business identity
# ============================================================================
from typing import Generator, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.context import AppContext
from app.services.business.business_store import BusinessStore

# JWT security for business authentication; tokens are issued by the auth service
jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token"
)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_db(context: AppContext = Depends(get_context)) -> Generator[Session, None, None]:
    """One session per request; closing it discards anything uncommitted"""
    db = context.new_session()
    try:
        yield db
    finally:
        db.close()


def get_store(
        db: Session = Depends(get_db),
        context: AppContext = Depends(get_context),
) -> BusinessStore:
    return context.store(db)


# ============================================================================
# JWT Authentication
# ============================================================================

def verify_access_token(token: str, context: AppContext) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid, expired or not an access token
    """
    try:
        payload = jwt.decode(
            token,
            context.settings.JWT_SECRET_KEY,
            algorithms=[context.settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def get_current_business_id(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
        context: AppContext = Depends(get_context),
) -> UUID:
    """
    Business id from the bearer token's ``sub`` claim.

    Usage in routes:
        @router.post("/businesses/me/availability")
        def replace(business_id: UUID = Depends(get_current_business_id)): ...
    """
    payload = verify_access_token(credentials.credentials, context)

    business_id_str: Optional[str] = payload.get("sub")
    if business_id_str is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return UUID(str(business_id_str))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid business ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )
