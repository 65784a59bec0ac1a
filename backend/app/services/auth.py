from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from app.core.config import settings
from app.core.logging import get_logger
from app.models import Role, User
from app.scheduling import ActorRole
from app.services import security

logger = get_logger(__name__)

ROLE_DEFINITIONS = {
    ActorRole.ADMIN.value: {
        "name": "Administrator",
        "permissions": [
            "appointments:write",
            "availability:write",
            "directory:write",
            "admin:manage",
        ],
    },
    ActorRole.PROVIDER.value: {
        "name": "Provider",
        "permissions": ["appointments:write", "availability:write"],
    },
    ActorRole.PATIENT.value: {
        "name": "Patient",
        "permissions": ["appointments:write"],
    },
}


class AuthenticationError(Exception):
    pass


def get_role_by_code(session: Session, code: str) -> Optional[Role]:
    statement = select(Role).where(Role.code == code)
    return session.exec(statement).first()


def get_user_by_username(session: Session, username: str) -> Optional[User]:
    statement = select(User).where(User.username == username)
    return session.exec(statement).first()


def authenticate_user(session: Session, username: str, password: str) -> User:
    user = get_user_by_username(session, username)
    if not user or not user.is_active:
        raise AuthenticationError("INVALID_CREDENTIALS")
    if not security.verify_password(password, user.password_hash):
        raise AuthenticationError("INVALID_CREDENTIALS")
    return user


def create_access_token_for_user(session: Session, user: User) -> tuple[str, str, int]:
    role = session.get(Role, user.role_id)
    role_code = role.code if role else ActorRole.PATIENT.value
    access_token = security.create_access_token(str(user.id), {"role": role_code})
    logger.info("auth.token_issued", user_id=user.id, role=role_code)
    return access_token, role_code, settings.access_token_expire_minutes * 60


def create_user(
    session: Session,
    *,
    username: str,
    password: str,
    display_name: str,
    role_code: str,
    patient_id: Optional[int] = None,
    provider_id: Optional[int] = None,
) -> User:
    role = get_role_by_code(session, role_code)
    if role is None:
        raise ValueError(f"Unknown role '{role_code}'")
    user = User(
        username=username,
        password_hash=security.hash_password(password),
        display_name=display_name,
        role_id=role.id,
        patient_id=patient_id,
        provider_id=provider_id,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def ensure_seed_data(session: Session) -> None:
    for code, data in ROLE_DEFINITIONS.items():
        role = get_role_by_code(session, code)
        if not role:
            role = Role(code=code, name=data["name"], permissions=data["permissions"])
            session.add(role)
            session.commit()
    admin_user = get_user_by_username(session, settings.first_superuser)
    admin_role = get_role_by_code(session, ActorRole.ADMIN.value)
    if admin_role and not admin_user:
        user = User(
            username=settings.first_superuser,
            password_hash=security.hash_password(settings.first_superuser_password),
            display_name="Administrator",
            role_id=admin_role.id,
        )
        session.add(user)
        session.commit()
        logger.info("auth.superuser_created", username=settings.first_superuser)


__all__ = [
    "authenticate_user",
    "create_access_token_for_user",
    "create_user",
    "ensure_seed_data",
    "AuthenticationError",
]
