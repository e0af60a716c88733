from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_auth_gateway, get_current_identity
from storefront.api.schemas import (
    AuthData,
    AuthResponse,
    LoginPayload,
    MessageResponse,
    ProfileResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterPayload,
    TokenData,
    UserProfile,
    UserPublic,
)
from storefront.security.tokens import AccessClaims
from storefront.services.auth_gateway import AuthGateway, AuthResult

router = APIRouter()  # main.py mounts at {API_PREFIX}/auth


def _auth_data(result: AuthResult) -> AuthData:
    return AuthData(
        user=UserPublic.model_validate(result.user),
        accessToken=result.tokens.access_token,
        refreshToken=result.tokens.refresh_token,
        expiresIn=result.tokens.expires_in,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, gateway: AuthGateway = Depends(get_auth_gateway)) -> AuthResponse:
    result = gateway.register(
        user_name=payload.user_name,
        email=str(payload.email),
        password=payload.password,
        telephone=payload.telephone,
        address=payload.address,
    )
    return AuthResponse(message="User registered successfully", data=_auth_data(result))


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginPayload, gateway: AuthGateway = Depends(get_auth_gateway)) -> AuthResponse:
    result = gateway.login(str(payload.email), payload.password)
    return AuthResponse(message="Login successful", data=_auth_data(result))


@router.post("/refresh", response_model=RefreshResponse)
def refresh_token(payload: RefreshRequest, gateway: AuthGateway = Depends(get_auth_gateway)) -> RefreshResponse:
    tokens = gateway.refresh(payload.refreshToken).tokens
    return RefreshResponse(
        data=TokenData(
            accessToken=tokens.access_token,
            refreshToken=tokens.refresh_token,
            expiresIn=tokens.expires_in,
        )
    )


@router.post("/logout", response_model=MessageResponse)
def logout(identity: AccessClaims = Depends(get_current_identity),
           gateway: AuthGateway = Depends(get_auth_gateway)) -> MessageResponse:
    gateway.logout(identity.user_id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=ProfileResponse)
def me(identity: AccessClaims = Depends(get_current_identity),
       gateway: AuthGateway = Depends(get_auth_gateway)) -> ProfileResponse:
    return ProfileResponse(data=UserProfile.model_validate(gateway.profile(identity.user_id)))
