"""Sample catalog and accounts for local development."""
import logging
from typing import Dict, List

from sqlalchemy import delete
from sqlalchemy.orm import Session

from storefront.db.models import Product, ProductImage, Role, User, UserStatus
from storefront.security.utils import build_password_context, hash_password

logger = logging.getLogger(__name__)

IMG = 'https://images.unsplash.com/photo-{}?w=500'

SAMPLE_PRODUCTS: List[Dict] = [
    {'name': 'Organic Green Tea Extract', 'description': 'Premium quality green tea extract rich in antioxidants. Perfect for daily wellness routine.',
     'price': 29.99, 'category': 'supplements', 'images': [IMG.format('1564890369478-c89ca6d9cde9')], 'stock': 100, 'ratings': (4.5, 24)},
    {'name': 'Vitamin D3 5000 IU', 'description': 'High potency Vitamin D3 supplement for immune support and bone health.',
     'price': 19.99, 'category': 'vitamins', 'images': [IMG.format('1550572017-4814c8db3f14')], 'stock': 150, 'ratings': (4.8, 45)},
    {'name': 'Omega-3 Fish Oil', 'description': 'Pure omega-3 fish oil capsules for heart and brain health.',
     'price': 24.99, 'category': 'supplements', 'images': [IMG.format('1505751172876-fa1923c5c528')], 'stock': 80, 'ratings': (4.6, 32)},
    {'name': 'Probiotic Complex', 'description': '50 billion CFU probiotic blend for digestive health and immunity.',
     'price': 34.99, 'category': 'probiotics', 'images': [IMG.format('1550572017-4814c8db3f14')], 'stock': 60, 'ratings': (4.7, 28)},
    {'name': 'Turmeric Curcumin', 'description': 'Organic turmeric with black pepper extract for maximum absorption.',
     'price': 22.99, 'category': 'herbs', 'images': [IMG.format('1615485290382-441e4d049cb5')], 'stock': 120, 'ratings': (4.4, 19)},
    {'name': 'Magnesium Glycinate', 'description': 'Highly absorbable magnesium for relaxation and better sleep.',
     'price': 18.99, 'category': 'minerals', 'images': [], 'stock': 90, 'ratings': (4.9, 56)},
    {'name': 'Collagen Peptides', 'description': 'Hydrolyzed collagen powder for skin elasticity and joint comfort.',
     'price': 39.99, 'category': 'skincare', 'images': [], 'stock': 70, 'ratings': (4.6, 41)},
    {'name': 'Ashwagandha Root Extract', 'description': 'Adaptogenic herb to support stress balance and energy.',
     'price': 26.99, 'category': 'herbs', 'images': [], 'stock': 85, 'ratings': (4.5, 33)},
    {'name': 'Whey Protein Isolate', 'description': 'Fast absorbing protein for post-workout recovery.',
     'price': 54.99, 'category': 'fitness', 'images': [], 'stock': 40, 'ratings': (4.7, 61)},
    {'name': 'Plant Protein Blend', 'description': 'Pea and rice protein blend for everyday nutrition.',
     'price': 44.99, 'category': 'nutrition', 'images': [], 'stock': 35, 'ratings': (4.3, 22)},
    {'name': 'Zinc Immune Support', 'description': 'Zinc picolinate for immune function.',
     'price': 14.99, 'category': 'minerals', 'images': [], 'stock': 110, 'ratings': (4.5, 27)},
    {'name': 'CoQ10 Ubiquinol', 'description': 'Active form of CoQ10 for cellular energy.',
     'price': 124.99, 'category': 'supplements', 'images': [], 'stock': 25, 'ratings': (4.8, 44)},
]

SAMPLE_USERS: List[Dict] = [
    {'user_name': 'Admin User', 'email': 'admin@wellness.com', 'password': 'Admin123!', 'role': Role.ADMIN.value},
    {'user_name': 'John Doe', 'email': 'john@example.com', 'password': 'User123!', 'role': Role.USER.value},
    {'user_name': 'Jane Smith', 'email': 'jane@example.com', 'password': 'User123!', 'role': Role.USER.value},
]


def seed(db: Session, reset: bool = True, bcrypt_rounds: int = 12) -> Dict[str, int]:
    if reset:
        db.execute(delete(ProductImage)); db.execute(delete(Product)); db.execute(delete(User))

    for p in SAMPLE_PRODUCTS:
        avg, count = p['ratings']
        obj = Product(name=p['name'], description=p['description'], price=p['price'], category=p['category'],
                      stock=p['stock'], ratings_average=avg, ratings_count=count)
        obj.images = [ProductImage(position=i, url=url) for i, url in enumerate(p['images'])]
        db.add(obj)

    ctx = build_password_context(bcrypt_rounds)
    for u in SAMPLE_USERS:
        db.add(User(user_name=u['user_name'], email=u['email'], password_hash=hash_password(ctx, u['password']),
                    role=u['role'], status=UserStatus.ACTIVE.value))
    db.commit()
    logger.info('Seeded %d products and %d users', len(SAMPLE_PRODUCTS), len(SAMPLE_USERS))
    return {'products': len(SAMPLE_PRODUCTS), 'users': len(SAMPLE_USERS)}
