from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
from storefront.api.deps import get_db, get_settings
from storefront.api.schemas import Pagination, ProductListResponse, ProductRead, ProductResponse
from storefront.catalog.query import QuerySpec, compile_query, total_pages
from storefront.catalog.store import CatalogStore
from storefront.core.config import Settings
from storefront.core.errors import NotFound

router = APIRouter()

def _as_int(raw: Optional[str], default: int) -> int:
    # non-numeric or zero falls back to the default; negatives pass through
    try:
        value = int(raw) if raw is not None else 0
    except ValueError:
        return default
    return value or default

@router.get('/', response_model=ProductListResponse)
def list_products(db: Session = Depends(get_db), settings: Settings = Depends(get_settings),
                  page: Optional[str] = None, limit: Optional[str] = None,
                  category: Optional[str] = None, search: Optional[str] = None,
                  priceRange: Optional[str] = None, sortBy: Optional[str] = None):
    spec = QuerySpec(
        page=_as_int(page, 1),
        limit=_as_int(limit, settings.DEFAULT_PAGE_LIMIT),
        category=category, search=search, price_range=priceRange, sort_by=sortBy,
    )
    result = CatalogStore(db).query(compile_query(spec))
    return ProductListResponse(
        data=[ProductRead.from_model(p) for p in result.items],
        pagination=Pagination(
            currentPage=spec.page,
            totalPages=total_pages(result.total_matches, spec.limit),
            totalProducts=result.total_matches,
        ),
    )

@router.get('/{product_id}', response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    obj = CatalogStore(db).get(product_id)
    if not obj: raise NotFound('Product not found')
    return ProductResponse(data=ProductRead.from_model(obj))
