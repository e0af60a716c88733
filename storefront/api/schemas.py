from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Literal

from storefront.db import models

class RegisterPayload(BaseModel):
    user_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    telephone: Optional[str] = None
    address: Optional[str] = None

class LoginPayload(BaseModel):
    email: EmailStr
    password: str

class RefreshRequest(BaseModel):
    refreshToken: str = ''

class UserPublic(BaseModel):
    id: int
    user_name: str
    email: str
    role: str
    status: str
    model_config = ConfigDict(from_attributes=True)

class UserProfile(UserPublic):
    telephone: str = ''
    address: str = ''
    joined_date: Optional[datetime] = None

class TokenData(BaseModel):
    accessToken: str
    refreshToken: str
    expiresIn: int

class AuthData(TokenData):
    user: UserPublic

class Ratings(BaseModel):
    average: float = 0
    count: int = 0

class ProductRead(BaseModel):
    id: int
    name: str
    description: str = ''
    price: float
    category: str
    images: List[str] = []
    stock: int = 0
    ratings: Ratings = Ratings()
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, p: models.Product) -> 'ProductRead':
        return cls(
            id=p.id, name=p.name, description=p.description or '', price=p.price,
            category=p.category, images=p.image_urls, stock=p.stock or 0,
            ratings=Ratings(average=p.ratings_average or 0, count=p.ratings_count or 0),
            createdAt=p.created_at, updatedAt=p.updated_at,
        )

class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalProducts: int

# Response envelopes: every success body has success=True, errors use ErrorResponse.
class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str

class MessageResponse(BaseModel):
    success: Literal[True] = True
    message: str

class AuthResponse(BaseModel):
    success: Literal[True] = True
    message: str
    data: AuthData

class RefreshResponse(BaseModel):
    success: Literal[True] = True
    data: TokenData

class ProfileResponse(BaseModel):
    success: Literal[True] = True
    data: UserProfile

class UserListResponse(BaseModel):
    success: Literal[True] = True
    data: List[UserPublic]

class ProductListResponse(BaseModel):
    success: Literal[True] = True
    data: List[ProductRead]
    pagination: Pagination

class ProductResponse(BaseModel):
    success: Literal[True] = True
    data: ProductRead
