"""Storefront load test scenarios.

ShopperJourney walks one shopper through browse -> cart -> checkout.
CheckoutContentionUser makes many shoppers race for the last few units of a
single size; the run is healthy when every unit is sold exactly once and the
losers are told ``InsufficientStock`` instead of getting an order.
"""

import os
import random
import threading

from locust import HttpUser, SequentialTaskSet, between, events, task

from loadtests.data_generators import (
    address_data,
    cart_line,
    product_data,
    scarce_product_data,
    unique_user_id,
)
from loadtests.helpers.response import error_type, extract_error_detail
from loadtests.helpers.state import ContentionState, ShopperState


def operator_headers() -> dict:
    token = os.getenv("STOREFRONT_ADMIN_TOKEN")
    return {"Authorization": f"Bearer {token}"} if token else {}


class ShopperJourney(SequentialTaskSet):
    """Seed Product -> Browse -> Add to Cart -> View Cart -> Place COD Order -> My Orders."""

    def on_start(self):
        self.state = ShopperState(user_id=unique_user_id())

    @task
    def seed_product(self):
        with self.client.post(
            "/products",
            json=product_data(),
            headers=operator_headers(),
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_ids.append(resp.json()["product_id"])
            else:
                resp.failure(f"Add product failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def browse(self):
        with self.client.get("/products", catch_response=True, name="GET /products") as resp:
            if resp.status_code != 200:
                resp.failure(f"List products failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def add_to_cart(self):
        product_id = random.choice(self.state.product_ids)
        product = self.client.get(f"/products/{product_id}", name="GET /products/{id}").json()
        size = random.choice(product["sizes"])["size"]
        line = cart_line(product_id, size)

        with self.client.post(
            f"/cart/{self.state.user_id}/items",
            json=line,
            catch_response=True,
            name="POST /cart/{user_id}/items",
        ) as resp:
            if resp.status_code == 200:
                self.state.cart_lines = [
                    {"product_id": item["product_id"], "size": item["size"], "quantity": item["quantity"]}
                    for item in resp.json()["items"]
                    if item["valid"]
                ]
            else:
                resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_cart(self):
        with self.client.get(
            f"/cart/{self.state.user_id}",
            catch_response=True,
            name="GET /cart/{user_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def place_order(self):
        if not self.state.cart_lines:
            self.interrupt()
            return

        with self.client.post(
            "/orders/cod",
            json={
                "user_id": self.state.user_id,
                "items": self.state.cart_lines,
                "address": address_data(),
            },
            catch_response=True,
            name="POST /orders/cod",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["id"])
            elif error_type(resp) == "InsufficientStock":
                # Another shopper bought it first; a correct outcome
                resp.success()
            else:
                resp.failure(f"Place order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def my_orders(self):
        with self.client.get(
            f"/users/{self.state.user_id}/orders",
            catch_response=True,
            name="GET /users/{user_id}/orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List my orders failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    tasks = [ShopperJourney]
    wait_time = between(0.5, 2)


# ---------------------------------------------------------------------------
# Checkout contention
# ---------------------------------------------------------------------------
_contention = ContentionState()
_contention_lock = threading.Lock()

CONTENTION_UNITS = int(os.getenv("LOADTEST_CONTENTION_UNITS", "5"))


class CheckoutContentionUser(HttpUser):
    """Every user tries to buy one unit of the same scarce product."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        with _contention_lock:
            if _contention.product_id is None:
                resp = self.client.post(
                    "/products",
                    json=scarce_product_data(CONTENTION_UNITS),
                    headers=operator_headers(),
                    name="POST /products (scarce)",
                )
                _contention.product_id = resp.json()["product_id"]
                _contention.units = CONTENTION_UNITS

    @task
    def race_for_last_unit(self):
        with self.client.post(
            "/orders/cod",
            json={
                "user_id": unique_user_id(),
                "items": [cart_line(_contention.product_id, "M", 1)],
                "address": address_data(),
            },
            catch_response=True,
            name="POST /orders/cod (contention)",
        ) as resp:
            if resp.status_code == 201:
                with _contention_lock:
                    _contention.placed += 1
            elif error_type(resp) in ("InsufficientStock", "TransactionConflict"):
                with _contention_lock:
                    _contention.rejected += 1
                resp.success()
            else:
                resp.failure(f"Contention order failed: {resp.status_code} — {extract_error_detail(resp)}")


@events.test_stop.add_listener
def report_contention(environment, **_kwargs):
    if _contention.product_id is None:
        return

    print(
        f"[LOADTEST] Contention: {_contention.placed} orders for {_contention.units} units, "
        f"{_contention.rejected} rejected"
    )
    if _contention.placed > _contention.units:
        print("[LOADTEST] OVERSOLD: more orders were placed than units were in stock")
        environment.process_exit_code = 1
