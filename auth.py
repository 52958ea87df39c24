"""
Auth Service
Login, registration and resolving the caller from a bearer token
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from database import USERS, JsonStore, get_db
from errors import DuplicateEmail, InvalidCredentials, NotFound, Unauthenticated, ValidationFailed
from schemas import Caller, Role, User
from security import create_access_token, decode_token, hash_password, verify_password

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as Unauthenticated (401), not 403
bearer_scheme = HTTPBearer(auto_error=False)

SELF_REGISTER_ROLES = (Role.USER, Role.STORE_OWNER)


def find_user_by_email(db: JsonStore, email: str) -> Optional[User]:
    # exact match, email addresses are compared case-sensitively
    for record in db.load(USERS):
        if record.get("email") == email:
            return User.model_validate(record)
    return None


def find_user(db: JsonStore, user_id: str) -> Optional[User]:
    for record in db.load(USERS):
        if record.get("id") == user_id:
            return User.model_validate(record)
    return None


def issue_token(user: User) -> str:
    return create_access_token({
        "sub": user.id,
        "id": user.id,
        "email": user.email,
        "role": user.role.value,
    })


def auth_response(user: User) -> Dict[str, Any]:
    return {"token": issue_token(user), "user": user.public_view()}


def login(db: JsonStore, email: str, password: str) -> Dict[str, Any]:
    """
    Verify credentials and issue a token

    Unknown email and wrong password raise the same InvalidCredentials so
    the response does not reveal which accounts exist.
    """
    user = find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise InvalidCredentials()
    logger.info(f"User logged in: {user.id} (role: {user.role.value})")
    return auth_response(user)


def add_user(db: JsonStore, email: str, password: str, name: str, role: Role) -> User:
    """Create a credential; the email check and insert share one lock window"""
    user = User(email=email, password_hash=hash_password(password), name=name, role=role)
    with db.collection(USERS) as users:
        if any(u.get("email") == user.email for u in users):
            raise DuplicateEmail()
        users.append(user.to_record())
    logger.info(f"Created user {user.id} (role: {user.role.value})")
    return user


def register(db: JsonStore, email: str, password: str, name: str, role: Role = Role.USER) -> Dict[str, Any]:
    if role not in SELF_REGISTER_ROLES:
        raise ValidationFailed("Role must be one of: user, store_owner")
    user = add_user(db, email, password, name, role)
    return auth_response(user)


def caller_from_token(db: JsonStore, token: Optional[str]) -> Caller:
    """
    Resolve the caller from a bearer token

    Missing, malformed, badly signed or expired tokens and tokens for users
    that no longer exist all raise Unauthenticated.
    """
    if not token:
        raise Unauthenticated("Access token required")
    payload = decode_token(token)
    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        raise Unauthenticated("Invalid token payload")
    user = find_user(db, user_id)
    if user is None:
        raise Unauthenticated("User not found")
    return Caller(id=user.id, email=user.email, role=user.role)


def me(db: JsonStore, caller: Caller) -> Dict[str, Any]:
    user = find_user(db, caller.id)
    if user is None:
        raise NotFound("User not found")
    return user.public_view()


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: JsonStore = Depends(get_db),
) -> Caller:
    """
    Dependency resolving the authenticated caller

    Usage:
        @app.get("/protected")
        def protected_route(caller: Caller = Depends(get_caller)):
            return {"user_id": caller.id}
    """
    token = credentials.credentials if credentials else None
    return caller_from_token(db, token)
