"""
Auth service: staff credentials and the access gate.

Access tokens are short-lived signed JWTs carrying the user id,
username and role. Refresh tokens are signed with a separate
secret and also stored, so they can be rotated on use and
dropped on logout.

Revocation is durable: logout writes the access token's jti to
the revoked_tokens table. Rows are kept until the token would
have expired anyway and are purged after that, along with
expired refresh tokens.

Open registration only ever creates staff users. An admin is
created by another admin, or from the command line with
``python -m bank_ledger.create_admin``.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bank_ledger.config import get_settings
from bank_ledger.errors import Forbidden, Unauthorized, ValidationError
from bank_ledger.models.base import unit_of_work, utcnow
from bank_ledger.models.enums import UserRole
from bank_ledger.models.revoked_token import RevokedToken
from bank_ledger.models.user import User, RefreshToken
from bank_ledger.schemas.auth import RegisterRequest, TokenPair

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class Subject:
    """An authenticated caller, as the ledger sees it."""
    user_id: int
    username: str
    role: UserRole


def require_role(subject: Subject, *roles: UserRole) -> Subject:
    if subject.role not in roles:
        raise Forbidden(
            f"Role '{subject.role.value}' is not allowed to perform this action"
        )
    return subject


def _from_timestamp(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)


class AuthService:

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    # --- Credential lifecycle ---

    def register(
        self,
        request: RegisterRequest,
        actor: Subject | None = None,
    ) -> tuple[User, TokenPair]:
        """
        Create a user and hand back a token pair for it.

        The requested role is honoured only when an admin is the
        one registering. Anyone else gets a staff account.
        """
        role = request.role
        if role == UserRole.ADMIN and (actor is None or actor.role != UserRole.ADMIN):
            logger.warning(
                "Admin role requested by a non-admin for %s, registering as staff",
                request.username,
            )
            role = UserRole.STAFF

        with unit_of_work(self.db, "register"):
            user = self._add_user(
                request.username, request.password, request.full_name, role
            )
            tokens = self._issue_tokens(user)

        logger.info("User %s registered", user.username, extra={"user_id": user.id})
        return user, tokens

    def create_user(
        self,
        username: str,
        password: str,
        full_name: str | None = None,
        role: UserRole = UserRole.STAFF,
    ) -> User:
        """Create a user without issuing tokens, for trusted callers only."""
        with unit_of_work(self.db, "create_user"):
            user = self._add_user(username, password, full_name, role)

        logger.info(
            "User %s created with role %s", user.username, role.value,
            extra={"user_id": user.id},
        )
        return user

    def login(self, username: str, password: str) -> TokenPair:
        user = self.db.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()
        if not user or not pwd_context.verify(password, user.password_hash):
            logger.warning("Failed login for %s", username)
            raise Unauthorized("Invalid username or password")

        with unit_of_work(self.db, "login"):
            tokens = self._issue_tokens(user)

        logger.info("User %s logged in", user.username, extra={"user_id": user.id})
        return tokens

    def refresh(self, token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair.

        The presented token is deleted, so each refresh token
        works exactly once.

        Two requests racing with the same token both run the
        DELETE, and only the one that actually removed the row
        gets a new pair.
        """
        claims = self._decode(token, self.settings.REFRESH_SECRET, REFRESH)

        with unit_of_work(self.db, "refresh"):
            consumed = self.db.execute(
                delete(RefreshToken).where(RefreshToken.token == token)
            ).rowcount
            if not consumed:
                raise Unauthorized("Invalid refresh token")
            user = self.db.get(User, int(claims["sub"]))
            if user is None:
                raise Unauthorized("Invalid refresh token")
            tokens = self._issue_tokens(user)

        return tokens

    def logout(self, access_token: str) -> None:
        """
        Revoke an access token and every refresh token of its user.
        """
        subject, claims = self._authorize_claims(access_token)

        with unit_of_work(self.db, "logout"):
            self.db.add(RevokedToken(
                jti=claims["jti"],
                expires_at=_from_timestamp(claims["exp"]),
            ))
            try:
                self.db.flush()
            except IntegrityError:
                # A concurrent logout with the same token got there first.
                raise Unauthorized("Token has been logged out")
            self.db.execute(
                delete(RefreshToken).where(RefreshToken.user_id == subject.user_id)
            )
            self._purge_expired()

        logger.info("User %s logged out", subject.username, extra={"user_id": subject.user_id})

    def purge_expired_revocations(self) -> int:
        """Delete revocation rows and refresh tokens that have expired anyway."""
        with unit_of_work(self.db, "purge_expired_revocations"):
            purged = self._purge_expired()
        return purged

    # --- Access gate ---

    def authorize(self, access_token: str) -> Subject:
        """
        Verify an access token and return who it belongs to.

        Raises Unauthorized for a missing, malformed, expired or
        revoked token.
        """
        subject, _ = self._authorize_claims(access_token)
        return subject

    # --- Internals ---

    def _authorize_claims(self, access_token: str) -> tuple[Subject, dict]:
        if not access_token:
            raise Unauthorized("Access denied. No token provided.")

        claims = self._decode(access_token, self.settings.JWT_SECRET, ACCESS)

        revoked = self.db.get(RevokedToken, claims["jti"])
        if revoked is not None:
            raise Unauthorized("Token has been logged out")

        try:
            subject = Subject(
                user_id=int(claims["sub"]),
                username=claims["username"],
                role=UserRole(claims["role"]),
            )
        except (KeyError, ValueError):
            raise Unauthorized("Invalid or expired token")
        return subject, claims

    def _decode(self, token: str, secret: str, kind: str) -> dict:
        try:
            claims = jwt.decode(
                token, secret, algorithms=[self.settings.JWT_ALGORITHM]
            )
        except JWTError:
            raise Unauthorized("Invalid or expired token")

        if claims.get("type") != kind or "jti" not in claims:
            raise Unauthorized("Invalid or expired token")
        return claims

    def _issue_tokens(self, user: User) -> TokenPair:
        """Sign a new token pair and store the refresh half. Flushes only."""
        now = datetime.now(timezone.utc)
        base_claims = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role.value,
        }

        access_token = jwt.encode(
            {
                **base_claims,
                "type": ACCESS,
                "jti": uuid.uuid4().hex,
                "exp": now + timedelta(
                    minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES
                ),
            },
            self.settings.JWT_SECRET,
            algorithm=self.settings.JWT_ALGORITHM,
        )

        refresh_expires = now + timedelta(
            days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        refresh_token = jwt.encode(
            {
                **base_claims,
                "type": REFRESH,
                "jti": uuid.uuid4().hex,
                "exp": refresh_expires,
            },
            self.settings.REFRESH_SECRET,
            algorithm=self.settings.JWT_ALGORITHM,
        )

        self.db.add(RefreshToken(
            user_id=user.id,
            token=refresh_token,
            expires_at=refresh_expires.replace(tzinfo=None),
        ))
        self.db.flush()

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def _add_user(self, username, password, full_name, role) -> User:
        existing = self.db.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()
        if existing:
            raise ValidationError("Username already exists")

        user = User(
            username=username,
            password_hash=pwd_context.hash(password),
            full_name=full_name or username,
            role=role,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def _purge_expired(self) -> int:
        now = utcnow()
        revoked = self.db.execute(
            delete(RevokedToken).where(RevokedToken.expires_at < now)
        )
        refresh = self.db.execute(
            delete(RefreshToken).where(RefreshToken.expires_at < now)
        )
        return (revoked.rowcount or 0) + (refresh.rowcount or 0)
