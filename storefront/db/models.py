from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer,String,Text,DateTime,ForeignKey,Numeric,Float,CheckConstraint
from datetime import datetime, timezone
from enum import Enum
from storefront.db.session import Base

def utcnow() -> datetime: return datetime.now(timezone.utc)

class Category(str, Enum):
    SUPPLEMENTS = 'supplements'
    VITAMINS = 'vitamins'
    MINERALS = 'minerals'
    HERBS = 'herbs'
    PROBIOTICS = 'probiotics'
    FITNESS = 'fitness'
    SKINCARE = 'skincare'
    NUTRITION = 'nutrition'

class Role(str, Enum):
    USER = 'user'
    ADMIN = 'admin'

class UserStatus(str, Enum):
    ACTIVE = 'active'
    UNVERIFIED = 'unverified'
    BANNED = 'banned'

class Product(Base):
    __tablename__='products'
    __table_args__ = (CheckConstraint('price >= 0', name='ck_products_price_nonneg'), CheckConstraint('stock >= 0', name='ck_products_stock_nonneg'))
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    ratings_average: Mapped[float] = mapped_column(Float, default=0)
    ratings_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    images = relationship('ProductImage', back_populates='product', cascade='all, delete-orphan',
                          order_by='ProductImage.position', lazy='selectin')

    @property
    def image_urls(self) -> list[str]:
        return [img.url for img in self.images]

class ProductImage(Base):
    __tablename__='product_images'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey('products.id', ondelete='CASCADE'))
    position: Mapped[int] = mapped_column(Integer, default=0)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    product = relationship('Product', back_populates='images')

class User(Base):
    __tablename__='users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), default=Role.USER.value)
    status: Mapped[str] = mapped_column(String(32), default=UserStatus.UNVERIFIED.value)
    telephone: Mapped[str] = mapped_column(String(64), default='')
    address: Mapped[str] = mapped_column(String(512), default='')
    # sha256 of the only refresh token currently honoured for this user
    refresh_token: Mapped[str | None] = mapped_column(String(64), nullable=True, default=None)
    joined_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
