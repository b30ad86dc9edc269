"""Validated product constructors keyed by category.

Every constructor takes a single mapping of fields. The common fields are
``name``, ``price``, ``stock``, ``description``, ``color`` and ``image_path``;
each category recognises its own extras on top of those. Unknown fields,
a missing name/price, and values the product model rejects all raise
``InvalidProductError`` with a per-field message dict.

Optional extras keep the lenient defaults the store has always applied:
a blank author, size or brand and a non-positive page count or warranty fall
back to placeholder values instead of failing.
"""

from collections.abc import Mapping

from pydantic import ValidationError

from storefront.catalogue.product import (
    DEFAULT_IMAGE,
    BookDetails,
    Category,
    ClothingDetails,
    ElectronicsDetails,
    Product,
)
from storefront.errors import InvalidProductError

COMMON_FIELDS = ("name", "price", "stock", "description", "color", "image_path")

CATEGORY_FIELDS = {
    Category.BOOKS: ("author", "pages"),
    Category.CLOTHING: ("size",),
    Category.ELECTRONICS: ("warranty_months", "brand"),
}

CATEGORY_COLORS = {
    Category.BOOKS: "white",
    Category.CLOTHING: "light_gray",
    Category.ELECTRONICS: "dark_gray",
}

CATEGORY_DEFAULT_EXTRAS = {
    Category.BOOKS: {"author": "Unknown author", "pages": 100},
    Category.CLOTHING: {"size": "M"},
    Category.ELECTRONICS: {"warranty_months": 12, "brand": "Generic Brand"},
}


def parse_category(value, default=None):
    """Resolve a category from an enum member, its name or its value (case-insensitive)."""
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        token = value.strip().upper()
        for category in Category:
            if token in (category.name, category.value.upper()):
                return category
    return default


def _text_or(value, fallback):
    if value is None or not str(value).strip():
        return fallback
    return str(value)


def _positive_or(value, fallback):
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return fallback


def _book_details(extra):
    return BookDetails(
        author=_text_or(extra.get("author"), "Unknown author"),
        pages=_positive_or(extra.get("pages"), 1),
    )


def _clothing_details(extra):
    return ClothingDetails(size=_text_or(extra.get("size"), "Unknown size"))


def _electronics_details(extra):
    return ElectronicsDetails(
        warranty_months=_positive_or(extra.get("warranty_months"), 1),
        brand=_text_or(extra.get("brand"), "Unknown brand"),
    )


_DETAIL_BUILDERS = {
    Category.BOOKS: _book_details,
    Category.CLOTHING: _clothing_details,
    Category.ELECTRONICS: _electronics_details,
}


def _messages_from(exc: ValidationError) -> dict[str, list[str]]:
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "product"
        messages.setdefault(field, []).append(error["msg"])
    return messages


def create_product(category, fields: Mapping) -> Product:
    """Build a product of ``category`` from one mapping of common and category fields."""
    resolved = parse_category(category)
    if resolved is None:
        raise InvalidProductError({"category": [f"Unsupported category: {category!r}"]})

    fields = dict(fields or {})
    recognised = set(COMMON_FIELDS) | set(CATEGORY_FIELDS[resolved])
    unknown = sorted(set(fields) - recognised)
    if unknown:
        raise InvalidProductError({key: [f"Not a recognised field for {resolved.value}"] for key in unknown})

    missing = [key for key in ("name", "price") if fields.get(key) is None]
    if missing:
        raise InvalidProductError({key: ["This field is required"] for key in missing})

    try:
        return Product(
            name=fields["name"],
            category=resolved,
            price=fields["price"],
            stock=fields.get("stock", 0),
            description=fields.get("description") or "",
            color=_text_or(fields.get("color"), "black"),
            image_path=_text_or(fields.get("image_path"), DEFAULT_IMAGE).strip(),
            details=_DETAIL_BUILDERS[resolved](fields),
        )
    except ValidationError as exc:
        raise InvalidProductError(_messages_from(exc)) from exc


def create_product_with_defaults(category, fields: Mapping) -> Product:
    """Build a product, filling category extras and colour with the catalog defaults."""
    resolved = parse_category(category, default=Category.ELECTRONICS)
    merged = {"color": CATEGORY_COLORS[resolved], **CATEGORY_DEFAULT_EXTRAS[resolved]}
    merged.update({key: value for key, value in dict(fields).items() if value is not None})
    return create_product(resolved, merged)


def create_book(**fields) -> Product:
    return create_product(Category.BOOKS, fields)


def create_clothing(**fields) -> Product:
    return create_product(Category.CLOTHING, fields)


def create_electronics(**fields) -> Product:
    return create_product(Category.ELECTRONICS, fields)
