from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.catalog.query import CompiledQuery, Predicate, SortKey
from storefront.db import models


@dataclass
class QueryResult:
    items: List[models.Product]
    total_matches: int


_SORT_COLUMNS = {
    'price': models.Product.price,
    'name': models.Product.name,
    'ratings_average': models.Product.ratings_average,
    'created_at': models.Product.created_at,
    'id': models.Product.id,
}


def _where(stmt, predicate: Predicate):
    if predicate.category:
        stmt = stmt.where(models.Product.category == predicate.category)
    if predicate.search:
        stmt = stmt.where(or_(
            models.Product.name.icontains(predicate.search, autoescape=True),
            models.Product.description.icontains(predicate.search, autoescape=True),
        ))
    if predicate.min_price is not None:
        stmt = stmt.where(models.Product.price >= predicate.min_price)
    if predicate.max_price is not None:
        stmt = stmt.where(models.Product.price <= predicate.max_price)
    return stmt


def _order_by(stmt, order: tuple[SortKey, ...]):
    for key in order:
        col = _SORT_COLUMNS[key.field]
        stmt = stmt.order_by(col.desc() if key.descending else col.asc())
    return stmt


class CatalogStore:
    """Read-only product queries over one session."""

    def __init__(self, db: Session):
        self.db = db

    def count(self, predicate: Predicate) -> int:
        stmt = _where(select(func.count()).select_from(models.Product), predicate)
        return self.db.execute(stmt).scalar_one()

    def query(self, compiled: CompiledQuery) -> QueryResult:
        total = self.count(compiled.predicate)
        window = compiled.window
        if window.is_empty or window.offset >= total:
            return QueryResult(items=[], total_matches=total)
        stmt = _where(select(models.Product), compiled.predicate)
        stmt = _order_by(stmt, compiled.order)
        # offset < total here, so clamping the limit keeps both within the driver's integer range
        stmt = stmt.offset(window.offset).limit(min(window.limit, total - window.offset))
        return QueryResult(items=list(self.db.execute(stmt).scalars().all()), total_matches=total)

    def get(self, product_id: int) -> Optional[models.Product]:
        return self.db.get(models.Product, product_id)
