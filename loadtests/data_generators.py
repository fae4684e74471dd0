"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the storefront's validation rules
(size labels, image limits, DeliveryAddress fields) and match the exact field
names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

SIZES = ["S", "M", "L", "XL", "XXL"]
CATEGORIES = {
    "Men": ["Topwear", "Bottomwear", "Winterwear"],
    "Women": ["Topwear", "Bottomwear", "Winterwear"],
    "Kids": ["Topwear", "Bottomwear", "Winterwear"],
}


def unique_user_id() -> str:
    """Generate shopper IDs like 'user-lt-a1b2c3d4'."""
    return f"user-lt-{uuid.uuid4().hex[:8]}"


def valid_email() -> str:
    """Generate emails that pass DeliveryAddress email validation."""
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:4]}@{domain}"


def address_data() -> dict:
    """Generate a delivery address matching AddressSchema field names."""
    return {
        "first_name": fake.first_name()[:100],
        "last_name": fake.last_name()[:100],
        "email": valid_email(),
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "country": "US",
        "phone": f"+1-{random.randint(200, 999)}-{random.randint(200, 999)}-{random.randint(1000, 9999)}",
    }


def product_data(stock_range=(5, 50), sizes=None) -> dict:
    """Generate a ProductRequest payload with random sizes and stock."""
    category = random.choice(list(CATEGORIES))
    sizes = sizes or sorted(random.sample(SIZES, k=random.randint(1, len(SIZES))), key=SIZES.index)
    return {
        "name": f"{fake.color_name()} {random.choice(['Tee', 'Hoodie', 'Jacket', 'Trousers'])}"[:255],
        "description": fake.sentence(nb_words=12),
        "price": round(random.uniform(9.99, 149.99), 2),
        "images": [fake.image_url() for _ in range(random.randint(1, 4))],
        "category": category,
        "sub_category": random.choice(CATEGORIES[category]),
        "sizes": [{"size": size, "stock": random.randint(*stock_range)} for size in sizes],
        "best_seller": random.random() < 0.2,
    }


def scarce_product_data(units: int = 1) -> dict:
    """A product with a single size holding only a few units, for contention runs."""
    return product_data(sizes=["M"]) | {"sizes": [{"size": "M", "stock": units}]}


def cart_line(product_id: str, size: str, quantity: int | None = None) -> dict:
    return {"product_id": product_id, "size": size, "quantity": quantity or random.randint(1, 3)}
