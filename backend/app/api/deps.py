from __future__ import annotations


from dataclasses import dataclass
from typing import Callable, Optional

import jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from app.core.config import settings
from app.db.session import get_session
from app.models import Role, User
from app.scheduling import Actor, ActorRole
from app.services import security

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


@dataclass
class AuthenticatedUser:
    user: User
    role: Role | None

    @property
    def role_code(self) -> Optional[str]:
        return self.role.code if self.role else None


@dataclass
class PageParams:
    page: int
    page_size: int


def get_db():
    with get_session() as session:
        yield session


async def get_current_user(
    token: str = Depends(oauth2_scheme), session: Session = Depends(get_db)
) -> AuthenticatedUser:
    try:
        payload = security.decode_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if subject is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload") from exc

    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    role = session.get(Role, user.role_id) if user.role_id else None
    return AuthenticatedUser(user=user, role=role)


def require_roles(*allowed_roles: ActorRole) -> Callable[[AuthenticatedUser], AuthenticatedUser]:
    allowed = {ActorRole(role).value for role in allowed_roles}

    async def checker(current: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if allowed and current.role_code not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return current

    return checker


def to_actor(current: AuthenticatedUser) -> Actor:
    """Map an authenticated user onto the scheduling actor it acts as."""
    role = ActorRole(current.role_code) if current.role_code else ActorRole.PATIENT
    if role == ActorRole.ADMIN:
        return Actor(actor_id=current.user.id, role=role)
    linked_id = current.user.patient_id if role == ActorRole.PATIENT else current.user.provider_id
    if linked_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Account is not linked to a {role.value} record",
        )
    return Actor(actor_id=linked_id, role=role)


async def get_actor(current: AuthenticatedUser = Depends(get_current_user)) -> Actor:
    return to_actor(current)


def get_page_params(
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1),
) -> PageParams:
    size = page_size or settings.default_page_size
    return PageParams(page=page, page_size=min(size, settings.max_page_size))

