"""Compiles flat listing parameters into a predicate, an order and a window.

Everything here is pure data: the catalog store turns a ``CompiledQuery``
into SQL, and the same input always compiles to the same output.
"""
import math
from dataclasses import dataclass, field
from typing import Optional

from storefront.core.errors import ValidationError
from storefront.db.models import Category

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12

# sortBy -> (field, descending); ties fall back to insertion order
SORT_KEYS = {
    'price-asc': ('price', False),
    'price-desc': ('price', True),
    'name-asc': ('name', False),
    'name-desc': ('name', True),
    'rating': ('ratings_average', True),
}
DEFAULT_SORT = ('created_at', True)


@dataclass(frozen=True)
class QuerySpec:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    category: Optional[str] = None
    search: Optional[str] = None
    price_range: Optional[str] = None
    sort_by: Optional[str] = None


@dataclass(frozen=True)
class Predicate:
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Window:
    offset: int
    limit: int

    @property
    def is_empty(self) -> bool:
        return self.limit <= 0 or self.offset < 0


@dataclass(frozen=True)
class CompiledQuery:
    predicate: Predicate
    order: tuple[SortKey, ...] = field(default_factory=tuple)
    window: Window = Window(0, DEFAULT_LIMIT)


def _parse_bound(text: str) -> Optional[float]:
    text = text.strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def parse_price_range(raw: Optional[str]) -> tuple[Optional[float], Optional[float]]:
    """Parse ``"min-max"`` leniently.

    Either side may be omitted (``"100-"``, ``"-20"``). Text that is not a
    finite non-negative number counts as an omitted bound, and a string with
    no hyphen yields no bounds at all. ``min > max`` is kept as given and
    simply matches nothing.
    """
    if not raw or '-' not in raw:
        return None, None
    low, _, high = raw.partition('-')
    return _parse_bound(low), _parse_bound(high)


def compile_predicate(category: Optional[str], search: Optional[str], price_range: Optional[str]) -> Predicate:
    if category:
        try:
            category = Category(category).value
        except ValueError:
            raise ValidationError(f"Unknown category '{category}'")
    min_price, max_price = parse_price_range(price_range)
    return Predicate(
        category=category or None,
        search=search or None,
        min_price=min_price,
        max_price=max_price,
    )


def compile_order(sort_by: Optional[str]) -> tuple[SortKey, ...]:
    if sort_by in SORT_KEYS:
        name, descending = SORT_KEYS[sort_by]
        return (SortKey(name, descending), SortKey('id'))
    name, descending = DEFAULT_SORT
    return (SortKey(name, descending), SortKey('id', descending))


def compile_window(page: int, limit: int) -> Window:
    return Window(offset=(page - 1) * limit, limit=limit)


def compile_query(spec: QuerySpec) -> CompiledQuery:
    return CompiledQuery(
        predicate=compile_predicate(spec.category, spec.search, spec.price_range),
        order=compile_order(spec.sort_by),
        window=compile_window(spec.page, spec.limit),
    )


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
