"""
Shopping cart held on the shopper's side.

The cart is never stored by the API. `CartStore` persists it as JSON in a
string key/value mapping (the browser's localStorage), one key per
signed-in user.
"""
import json
from typing import Any, Dict, List, MutableMapping, Optional

from pydantic import TypeAdapter

from schemas import OrderItem

CartItem = OrderItem

TAX_RATE = 0.08

GUEST_CART_KEY = "gucci-cart"
LAST_ORDER_ID_KEY = "lastOrderId"
LAST_ORDER_DETAILS_KEY = "lastOrderDetails"

_items_adapter = TypeAdapter(List[CartItem])


class Cart:
    def __init__(self, items: Optional[List[CartItem]] = None):
        self.items: List[CartItem] = list(items or [])

    def __len__(self):
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: str) -> Optional[CartItem]:
        return next((it for it in self.items if it.id == product_id), None)

    def add_product(self, product: Dict[str, Any], quantity: int = 1) -> Optional[CartItem]:
        """Add a catalogue product, merging with an existing line for the same product.

        A quantity below 1 is ignored, as in `update_quantity`.
        """
        product_id = str(product.get("_id") or product.get("id"))
        existing = self.find(product_id)
        if quantity < 1:
            return existing
        if existing:
            existing.quantity += quantity
            return existing
        item = CartItem(
            id=product_id,
            name=product["name"],
            price=product["price"],
            image=product.get("image"),
            quantity=quantity,
        )
        self.items.append(item)
        return item

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity < 1:
            return
        item = self.find(product_id)
        if item:
            item.quantity = quantity

    def remove(self, product_id: str) -> None:
        self.items = [it for it in self.items if it.id != product_id]

    def clear(self) -> None:
        self.items = []

    def subtotal(self) -> float:
        return sum(it.price * it.quantity for it in self.items)

    def shipping(self) -> float:
        # Free at cart level; delivery cost is added during checkout
        return 0.0

    def tax(self) -> float:
        return self.subtotal() * TAX_RATE

    def total(self) -> float:
        return self.subtotal() + self.shipping() + self.tax()

    def item_count(self) -> int:
        return sum(it.quantity for it in self.items)

    def to_list(self) -> List[Dict[str, Any]]:
        return [it.model_dump() for it in self.items]


def cart_key(user: Optional[Dict[str, Any]]) -> str:
    if not user:
        return GUEST_CART_KEY
    return f"{GUEST_CART_KEY}-{user.get('_id') or user.get('email')}"


class CartStore:
    def __init__(self, storage: MutableMapping[str, str]):
        self.storage = storage

    def load(self, user: Optional[Dict[str, Any]] = None) -> Cart:
        raw = self.storage.get(cart_key(user))
        if not raw:
            return Cart()
        return Cart(_items_adapter.validate_python(json.loads(raw)))

    def save(self, user: Optional[Dict[str, Any]], cart: Cart) -> None:
        # Guest carts live only in memory
        if not user:
            return
        self.storage[cart_key(user)] = json.dumps(cart.to_list())

    def clear(self, user: Optional[Dict[str, Any]]) -> None:
        self.save(user, Cart())

    def save_last_order(self, order: Dict[str, Any]) -> None:
        """Hand a placed order over to the confirmation page."""
        self.storage[LAST_ORDER_ID_KEY] = order["orderId"]
        self.storage[LAST_ORDER_DETAILS_KEY] = json.dumps(order)

    def load_last_order(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get(LAST_ORDER_DETAILS_KEY)
        return json.loads(raw) if raw else None
