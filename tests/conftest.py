from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.db.models import Product, ProductImage
from storefront.db.session import Database
from storefront.main import create_app

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)

# name, description, price, category, rating
CATALOG = [
    ('Vitamin C 1000mg', 'Immune support with rose hips', 12.50, 'vitamins', 4.2),
    ('Vitamin D3', 'Sunshine vitamin for bones', 19.99, 'vitamins', 4.8),
    ('Omega-3 Fish Oil', 'Heart and brain health', 24.99, 'supplements', 4.6),
    ('Probiotic Complex', '50 billion CFU blend', 34.99, 'probiotics', 4.7),
    ('Turmeric Curcumin', 'Organic turmeric with black pepper', 22.99, 'herbs', 4.4),
    ('Magnesium Glycinate', 'Relaxation and better sleep', 18.99, 'minerals', 4.9),
    ('Collagen Cream', 'Hydrating face cream', 40.00, 'skincare', 4.1),
    ('Whey Protein', 'Post-workout 100% protein', 54.99, 'fitness', 4.7),
    ('Plant Protein', 'Pea and rice protein blend', 44.99, 'nutrition', 4.3),
    ('Zinc Tablets', 'Immune function', 19.99, 'minerals', 4.5),
    ('CoQ10 Ubiquinol', 'Cellular energy', 124.99, 'supplements', 4.8),
    ('Green Tea Extract', 'Antioxidant VITAMIN blend', 20.00, 'supplements', 4.5),
    ('Ashwagandha', 'Adaptogenic root_extract', 26.99, 'herbs', 4.5),
]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        JWT_SECRET='test-secret',
        JWT_REFRESH_SECRET='test-refresh-secret',
        BCRYPT_ROUNDS=4,
        LOG_LEVEL='WARNING',
        API_BASE_URL='http://testserver/api',
    )


@pytest.fixture
def database():
    db = Database('sqlite://')
    db.init()
    yield db
    db.close()


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def catalog(database):
    with database.session() as s:
        for i, (name, description, price, category, rating) in enumerate(CATALOG):
            p = Product(name=name, description=description, price=price, category=category,
                        stock=10 + i, ratings_average=rating, ratings_count=i,
                        created_at=BASE + timedelta(days=i), updated_at=BASE + timedelta(days=i))
            p.images = [ProductImage(position=0, url=f'https://img.example.com/{i}.jpg')]
            s.add(p)
        s.commit()
    return CATALOG


@pytest.fixture
def register(client):
    def _register(email='jane@example.com', password='secret123', user_name='Jane'):
        resp = client.post('/api/auth/register', json={'user_name': user_name, 'email': email, 'password': password})
        assert resp.status_code == 201, resp.text
        return resp.json()['data']
    return _register


def bearer(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}
