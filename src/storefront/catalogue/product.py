"""Product — a common catalog record carrying a category-tagged detail payload.

A product is identified by ``(name, category)``. Price and stock are the only
attributes that change after construction; their setters reject invalid
values and leave the previous value in place. Products are shared by
reference between the catalog and every cart line that points at them.
"""

import math
from enum import Enum
from typing import Annotated, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = structlog.get_logger(__name__)

DEFAULT_IMAGE = "images/default.jpg"


class Category(Enum):
    BOOKS = "Books"
    CLOTHING = "Clothing"
    ELECTRONICS = "Electronics"


# ---------------------------------------------------------------------------
# Category payloads
# ---------------------------------------------------------------------------
class BookDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["book"] = "book"
    author: str = "Unknown author"
    pages: int = Field(default=1, ge=1)


class ClothingDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["clothing"] = "clothing"
    size: str = "Unknown size"


class ElectronicsDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["electronics"] = "electronics"
    warranty_months: int = Field(default=1, ge=1)
    brand: str = "Unknown brand"


ProductDetails = Annotated[
    BookDetails | ClothingDetails | ElectronicsDetails,
    Field(discriminator="kind"),
]

_DETAILS_BY_CATEGORY = {
    Category.BOOKS: BookDetails,
    Category.CLOTHING: ClothingDetails,
    Category.ELECTRONICS: ElectronicsDetails,
}


def details_type_for(category):
    """Return the payload model that belongs to ``category``."""
    return _DETAILS_BY_CATEGORY[category]


def _is_positive_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and value > 0


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------
class Product(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(min_length=1, frozen=True)
    category: Category = Field(frozen=True)
    price: float = Field(gt=0, allow_inf_nan=False)
    stock: int = Field(default=0, ge=0)
    description: str = ""
    color: str = "black"
    image_path: str = DEFAULT_IMAGE
    details: ProductDetails = Field(frozen=True)

    @field_validator("name")
    @classmethod
    def name_must_be_csv_safe(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("Product name must not be blank")
        if "," in value:
            raise ValueError("Product name must not contain commas")
        return value

    @model_validator(mode="after")
    def details_must_match_category(self):
        expected = _DETAILS_BY_CATEGORY[self.category]
        if not isinstance(self.details, expected):
            raise ValueError(
                f"{self.category.value} products require {expected.__name__}, got {type(self.details).__name__}"
            )
        return self

    # -------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------
    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Product):
            return NotImplemented
        if self.name != other.name or self.category != other.category:
            return False

        match self.details:
            case ClothingDetails(size=size):
                return size == other.details.size
            case ElectronicsDetails(brand=brand):
                return brand == other.details.brand
            case _:
                return True

    def __hash__(self):
        return hash((self.name, self.category))

    def matches_name(self, name) -> bool:
        """Case-insensitive name match used by catalog lookups."""
        return name is not None and self.name.lower() == name.strip().lower()

    # -------------------------------------------------------------------
    # Price and stock
    # -------------------------------------------------------------------
    def update_price(self, price) -> bool:
        """Set a new price. Non-positive or non-numeric prices are rejected."""
        if not _is_positive_number(price):
            logger.debug("Rejected price update", product=self.name, price=price)
            return False
        self.price = float(price)
        return True

    def increase_stock(self, amount) -> bool:
        if not _is_positive_int(amount):
            return False
        self.stock = self.stock + amount
        return True

    def decrease_stock(self, amount) -> bool:
        """Take ``amount`` units out of stock. Fails when stock would go negative."""
        if not _is_positive_int(amount) or self.stock - amount < 0:
            return False
        self.stock = self.stock - amount
        return True

    def update_description(self, description) -> bool:
        if description is None:
            return False
        self.description = description
        return True

    def is_available(self) -> bool:
        return self.stock > 0

    # -------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------
    def display_name(self) -> str:
        return self.name

    def display_details(self) -> str:
        lines = [
            f"Name: {self.name}",
            f"Price: {self.price:.2f}",
            f"Category: {self.category.value}",
            f"Stock: {self.stock}",
            f"Description: {self.description}",
            f"Color: {self.color}",
            f"Image: {self.image_path}",
        ]

        match self.details:
            case BookDetails(author=author, pages=pages):
                lines += [f"Author: {author}", f"Pages: {pages}"]
            case ClothingDetails(size=size):
                lines.append(f"Size: {size}")
            case ElectronicsDetails(warranty_months=months, brand=brand):
                lines += [f"Warranty Months: {months}", f"Brand: {brand}"]

        return "\n".join(lines)

    def __str__(self):
        return f"{self.name} ({self.category.value}) {self.price:.2f} x{self.stock}"
