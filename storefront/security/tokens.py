"""Signed access/refresh token pairs.

Access tokens are verified purely cryptographically. Refresh tokens carry a
unique ``jti`` so two tokens issued in the same second still differ; whether
a refresh token is the one currently honoured for its user is decided by the
auth gateway against the persisted digest.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from storefront.core.config import Settings
from storefront.core.errors import InvalidToken
from storefront.security.utils import generate_jti

ACCESS = 'access'
REFRESH = 'refresh'


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    role: str


class TokenService:
    def __init__(self, secret: str, refresh_secret: str, algorithm: str = 'HS256',
                 access_ttl: timedelta = timedelta(hours=2),
                 refresh_ttl: timedelta = timedelta(days=7)):
        self.secret = secret
        self.refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> 'TokenService':
        return cls(
            secret=settings.JWT_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRES_SECONDS),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRES_DAYS),
        )

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    def create_access_token(self, user_id: int, role: str) -> str:
        iat = self.now()
        payload = {'sub': str(user_id), 'role': role, 'iat': iat, 'exp': iat + self.access_ttl, 'type': ACCESS}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def create_refresh_token(self, user_id: int) -> str:
        iat = self.now()
        payload = {'sub': str(user_id), 'jti': generate_jti(), 'iat': iat, 'exp': iat + self.refresh_ttl, 'type': REFRESH}
        return jwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def issue(self, user_id: int, role: str) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user_id, role),
            refresh_token=self.create_refresh_token(user_id),
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def _decode(self, token: str, secret: str, expected_type: str) -> dict:
        try:
            claims = jwt.decode(token, secret, algorithms=[self.algorithm],
                                options={'require': ['sub', 'iat', 'exp']})
        except jwt.PyJWTError:
            raise InvalidToken()
        if claims.get('type') != expected_type:
            raise InvalidToken('Invalid token type')
        try:
            claims['sub'] = int(claims['sub'])
        except (TypeError, ValueError):
            raise InvalidToken()
        return claims

    def verify_access(self, token: str) -> AccessClaims:
        claims = self._decode(token, self.secret, ACCESS)
        return AccessClaims(user_id=claims['sub'], role=claims.get('role', ''))

    def verify_refresh(self, token: str) -> int:
        claims = self._decode(token, self.refresh_secret, REFRESH)
        if not claims.get('jti'):
            raise InvalidToken('Invalid refresh token')
        return claims['sub']
