"""API Dependencies - back-office authentication"""
from functools import lru_cache
from typing import Dict, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from domain.auth import User, UserInDB
from infrastructure.config import settings
from infrastructure.security import decode_access_token, get_password_hash

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

ADMIN_USER_ID = UUID("123e4567-e89b-12d3-a456-426614174000")


@lru_cache(maxsize=1)
def admin_accounts() -> Dict[str, UserInDB]:
    """Accounts configured through settings, hashed on first use"""
    return {
        settings.admin_username: UserInDB(
            user_id=ADMIN_USER_ID,
            username=settings.admin_username,
            full_name="Villa Admin",
            email="admin@stayinubud.com",
            is_admin=True,
            hashed_password=get_password_hash(settings.admin_password),
        )
    }


def get_user(username: str) -> Optional[UserInDB]:
    return admin_accounts().get(username)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> UserInDB:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        username = decode_access_token(token).get("sub")
    except JWTError:
        raise credentials_exception
    if username is None:
        raise credentials_exception

    user = get_user(username)
    if user is None:
        raise credentials_exception
    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
