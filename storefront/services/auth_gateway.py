"""Registration, login, refresh-token rotation, logout and role checks.

The user's ``refresh_token`` column holds the digest of the single refresh
token currently honoured for that user. Issuing a pair overwrites it, so any
earlier refresh token stops working even before it expires; logout clears it.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError

from storefront.core.errors import (
    AccountBanned,
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    InvalidToken,
    ValidationError,
)
from storefront.db.models import Role, User, UserStatus, utcnow
from storefront.security.tokens import TokenPair, TokenService
from storefront.security.utils import (
    build_password_context,
    digests_match,
    generate_jti,
    hash_password,
    token_sha256,
    verify_password,
)
from storefront.services.users import UserStore, normalize_email

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def password_context(rounds: int) -> CryptContext:
    return build_password_context(rounds)


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    return password_context(rounds).hash(generate_jti())


@dataclass
class AuthResult:
    user: User
    tokens: TokenPair


class AuthGateway:
    def __init__(self, users: UserStore, tokens: TokenService, bcrypt_rounds: int = 12):
        self.users = users
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        self.pwd_ctx = password_context(bcrypt_rounds)

    def _issue(self, user: User) -> TokenPair:
        pair = self.tokens.issue(user.id, user.role)
        self.users.set_refresh_digest(user, token_sha256(pair.refresh_token))
        return pair

    def register(self, user_name: str, email: str, password: str,
                 telephone: Optional[str] = None, address: Optional[str] = None) -> AuthResult:
        if not user_name or not user_name.strip():
            raise ValidationError('Username is required')
        if not email or not password:
            raise ValidationError('Email and password are required')
        email = normalize_email(email)
        if self.users.by_email(email):
            raise DuplicateEmail()

        now = utcnow()
        user = User(
            user_name=user_name.strip(),
            email=email,
            password_hash=hash_password(self.pwd_ctx, password),
            role=Role.USER.value,
            status=UserStatus.ACTIVE.value,
            telephone=telephone or '',
            address=address or '',
            joined_date=now,
            created_at=now,
            updated_at=now,
        )
        try:
            user = self.users.add(user)
        except IntegrityError:
            self.users.rollback()
            raise DuplicateEmail()
        logger.info('Registered user id=%s', user.id)
        return AuthResult(user=user, tokens=self._issue(user))

    def login(self, email: str, password: str) -> AuthResult:
        user = self.users.by_email(email or '')
        if user is None:
            # keep the unknown-email path as slow as a real password check
            verify_password(self.pwd_ctx, password or '', _dummy_hash(self.bcrypt_rounds))
            logger.info('Failed login for unknown email')
            raise InvalidCredentials()
        if not verify_password(self.pwd_ctx, password or '', user.password_hash):
            logger.info('Failed login for user id=%s', user.id)
            raise InvalidCredentials()
        if user.status == UserStatus.BANNED.value:
            logger.warning('Banned user id=%s attempted login', user.id)
            raise AccountBanned()
        return AuthResult(user=user, tokens=self._issue(user))

    def refresh(self, refresh_token: str) -> AuthResult:
        if not refresh_token:
            raise InvalidToken('Refresh token required')
        user_id = self.tokens.verify_refresh(refresh_token)
        user = self.users.get(user_id)
        if user is None or not digests_match(user.refresh_token, token_sha256(refresh_token)):
            logger.warning('Rejected superseded or unknown refresh token for user id=%s', user_id)
            raise InvalidToken('Invalid refresh token')
        return AuthResult(user=user, tokens=self._issue(user))

    def logout(self, user_id: int) -> None:
        user = self.users.get(user_id)
        if user is not None:
            self.users.set_refresh_digest(user, None)
            logger.info('Logged out user id=%s', user_id)

    def profile(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise InvalidToken('User not found')
        return user

    def authorize(self, user_id: int, allowed_roles: Iterable[str]) -> User:
        # role comes from the store, not the token, so demotions apply immediately
        user = self.profile(user_id)
        allowed: List[str] = [getattr(r, 'value', r) for r in allowed_roles]
        if user.role not in allowed:
            raise Forbidden()
        return user
