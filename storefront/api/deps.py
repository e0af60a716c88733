from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.core.config import Settings
from storefront.core.errors import InvalidToken
from storefront.db.models import Role, User
from storefront.security.tokens import AccessClaims, TokenService
from storefront.services.auth_gateway import AuthGateway
from storefront.services.users import UserStore

security = HTTPBearer(auto_error=False)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service

def get_db(request: Request):
    db = request.app.state.database.session()
    try: yield db
    finally: db.close()

def get_auth_gateway(db: Session = Depends(get_db), tokens: TokenService = Depends(get_token_service),
                     settings: Settings = Depends(get_settings)) -> AuthGateway:
    return AuthGateway(UserStore(db), tokens, bcrypt_rounds=settings.BCRYPT_ROUNDS)

def get_current_identity(creds: HTTPAuthorizationCredentials = Depends(security),
                         tokens: TokenService = Depends(get_token_service)) -> AccessClaims:
    if not creds: raise InvalidToken('Not authorized to access this route')
    return tokens.verify_access(creds.credentials)

def require_role(*roles: Role):
    def _checker(identity: AccessClaims = Depends(get_current_identity),
                 gateway: AuthGateway = Depends(get_auth_gateway)) -> User:
        return gateway.authorize(identity.user_id, roles)
    return _checker
