"""Product aggregate root with its per-size stock counters.

A product lists a subset of the fixed size range and owns one stock counter
per listed size. Stock never goes negative: the field refuses it, and
``decrement_stock`` floors at zero instead of failing.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.catalog.events import ProductAdded, ProductEdited, StockDecremented
from storefront.domain import storefront

MAX_IMAGES = 4


class Size(Enum):
    """The fixed size range, smallest first."""

    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"


_SIZE_ORDER = {size.value: position for position, size in enumerate(Size)}


def size_sort_key(label):
    return _SIZE_ORDER.get(label, len(_SIZE_ORDER))


def normalize_sizes(sizes):
    """Turn ``[{"size": "M", "stock": "3"}, ...]`` into clean, ordered dicts.

    Raises ValidationError for unknown labels, duplicates or negative stock.
    """
    errors = []
    seen = set()
    normalized = []
    for entry in sizes or []:
        label = entry.get("size")
        if label not in _SIZE_ORDER:
            errors.append(f"Unknown size '{label}'")
            continue
        if label in seen:
            errors.append(f"Size {label} is listed more than once")
            continue
        seen.add(label)

        try:
            stock = int(entry.get("stock", 0))
        except (TypeError, ValueError):
            errors.append(f"Stock for size {label} must be a whole number")
            continue
        if stock < 0:
            errors.append(f"Stock for size {label} cannot be negative")
            continue
        normalized.append({"size": label, "stock": stock})

    if errors:
        raise ValidationError({"sizes": errors})
    if not normalized:
        raise ValidationError({"sizes": ["A product must list at least one size"]})

    return sorted(normalized, key=lambda s: size_sort_key(s["size"]))


@storefront.entity(part_of="Product")
class SizeStock:
    """Stock counter for one size of a product."""

    size: String(required=True, max_length=3, choices=Size)
    stock: Integer(required=True, min_value=0)


@storefront.aggregate
class Product:
    """Product aggregate root."""

    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True, min_value=0.01)
    images: Text()  # JSON array of image URLs, primary first
    category: String(required=True, max_length=100)
    sub_category: String(required=True, max_length=100)
    sizes: HasMany(SizeStock)
    best_seller: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def sizes_must_be_unique(self):
        labels = [s.size for s in self.sizes]
        if len(labels) != len(set(labels)):
            raise ValidationError({"sizes": ["Each size can be listed only once"]})

    @invariant.post
    def must_list_at_least_one_size(self):
        if not self.sizes:
            raise ValidationError({"sizes": ["A product must list at least one size"]})

    @invariant.post
    def images_within_limits(self):
        urls = self.image_urls
        if not urls:
            raise ValidationError({"images": ["A product needs at least one image"]})
        if len(urls) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot have more than {MAX_IMAGES} images"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, description, price, images, category, sub_category, sizes, best_seller=False):
        normalized = normalize_sizes(sizes)
        now = datetime.now(UTC)

        product = cls(
            name=name,
            description=description,
            price=price,
            images=json.dumps(list(images or [])),
            category=category,
            sub_category=sub_category,
            sizes=[SizeStock(size=s["size"], stock=s["stock"]) for s in normalized],
            best_seller=bool(best_seller),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                category=category,
                sizes=json.dumps(normalized),
                best_seller=bool(best_seller),
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def image_urls(self):
        return json.loads(self.images) if self.images else []

    @property
    def primary_image(self):
        urls = self.image_urls
        return urls[0] if urls else None

    @property
    def ordered_sizes(self):
        return sorted(self.sizes, key=lambda s: size_sort_key(s.size))

    def size_entry(self, size):
        return next((s for s in self.sizes if s.size == size), None)

    def stock_for(self, size):
        """Current stock for ``size``, or None when the size is not listed."""
        entry = self.size_entry(size)
        return entry.stock if entry is not None else None

    # -------------------------------------------------------------------
    # Catalog edits
    # -------------------------------------------------------------------
    def edit(self, name, description, price, images, category, sub_category, sizes, best_seller=False):
        """Replace the product's details and its whole size table."""
        normalized = normalize_sizes(sizes)

        with atomic_change(self):
            self.name = name
            self.description = description
            self.price = price
            self.images = json.dumps(list(images or []))
            self.category = category
            self.sub_category = sub_category
            self.best_seller = bool(best_seller)

            wanted = {s["size"]: s["stock"] for s in normalized}
            for entry in list(self.sizes):
                if entry.size not in wanted:
                    self.remove_sizes(entry)
            for label, stock in wanted.items():
                entry = self.size_entry(label)
                if entry is None:
                    self.add_sizes(SizeStock(size=label, stock=stock))
                elif entry.stock != stock:
                    entry.stock = stock

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductEdited(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                sizes=json.dumps(normalized),
                edited_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def decrement_stock(self, size, quantity):
        """Take ``quantity`` units of ``size`` out of stock, flooring at zero.

        Returns ``(previous_stock, new_stock)``.
        """
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        entry = self.size_entry(size)
        if entry is None:
            raise ValidationError({"size": [f"Size {size} is not listed for this product"]})

        previous = entry.stock
        entry.stock = max(0, previous - quantity)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                size=size,
                requested=quantity,
                previous_stock=previous,
                new_stock=entry.stock,
                decremented_at=now,
            )
        )
        return previous, entry.stock
