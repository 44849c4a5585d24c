"""
Access gate dependencies.

Every protected route depends on get_current_subject. The
ledger services themselves never look at credentials; by the
time they run, the caller has already been authorized here.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bank_ledger.models.base import get_db
from bank_ledger.models.enums import UserRole
from bank_ledger.services.auth_service import AuthService, Subject, require_role

bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    return credentials.credentials if credentials else None


def get_current_subject(
    token: str | None = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> Subject:
    return AuthService(db).authorize(token)


def require_admin(
    subject: Subject = Depends(get_current_subject),
) -> Subject:
    return require_role(subject, UserRole.ADMIN)
