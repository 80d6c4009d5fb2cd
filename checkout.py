"""
Checkout flow: review -> shipping -> delivery -> payment -> placed.

The flow lives in memory for one visit to the checkout page. Payment is
simulated with a delay; the returned order payload is what the
confirmation page posts to /api/orders.
"""
import logging
import re
import time
from datetime import date, datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Callable, Dict, Iterable, List, Optional

import settings
from cart import TAX_RATE, Cart, CartItem, CartStore
from countries import is_phone_valid, phone_validation_message

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DELIVERY_OPTIONS: Dict[str, Dict[str, Any]] = {
    "standard": {"name": "Standard Delivery", "desc": "5-7 business days", "price": 0, "days": 7},
    "express": {"name": "Express Delivery", "desc": "2-3 business days", "price": 25, "days": 3},
    "overnight": {"name": "Overnight Delivery", "desc": "Next business day", "price": 50, "days": 1},
}

PAYMENT_METHODS = ("card", "paypal")

SHIPPING_FIELDS = ("firstName", "lastName", "email", "phone", "street", "city", "state", "zipCode", "country", "countryCode")


class Step(IntEnum):
    REVIEW = 1
    SHIPPING = 2
    DELIVERY = 3
    PAYMENT = 4
    PLACED = 5


class CheckoutError(Exception):
    pass


class EmptyCartError(CheckoutError):
    pass


class StepError(CheckoutError):
    pass


class CheckoutValidationError(CheckoutError):
    def __init__(self, message: str, errors: Dict[str, str]):
        super().__init__(message)
        self.errors = errors


def delivery_option(option: str) -> Dict[str, Any]:
    try:
        return DELIVERY_OPTIONS[option]
    except KeyError:
        raise ValueError(f"Unknown delivery option: {option}")


def shipping_cost(option: str) -> float:
    return float(delivery_option(option)["price"])


def compute_totals(items: Iterable[CartItem], option: str = "standard") -> Dict[str, float]:
    items = list(items)
    subtotal = sum(it.price * it.quantity for it in items)
    shipping = shipping_cost(option)
    tax = subtotal * TAX_RATE
    return {
        "subtotal": round(subtotal, 2),
        "shipping": shipping,
        "tax": round(tax, 2),
        "total": round(subtotal + shipping + tax, 2),
        "itemCount": sum(it.quantity for it in items),
    }


def estimated_delivery(option: str, today: Optional[date] = None) -> date:
    today = today or date.today()
    return today + timedelta(days=delivery_option(option)["days"])


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_shipping_address(address: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if _blank(address.get("firstName")):
        errors["firstName"] = "First name is required"
    if _blank(address.get("lastName")):
        errors["lastName"] = "Last name is required"
    if _blank(address.get("email")):
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(address["email"]):
        errors["email"] = "Invalid email format"
    if _blank(address.get("countryCode")):
        errors["countryCode"] = "Country is required"
    if _blank(address.get("phone")):
        errors["phone"] = "Phone number is required"
    elif not _blank(address.get("countryCode")) and not is_phone_valid(address["phone"], address["countryCode"]):
        errors["phone"] = phone_validation_message(address["countryCode"])
    if _blank(address.get("street")):
        errors["street"] = "Street address is required"
    if _blank(address.get("city")):
        errors["city"] = "City is required"
    if _blank(address.get("state")):
        errors["state"] = "State is required"
    if _blank(address.get("zipCode")):
        errors["zipCode"] = "ZIP code is required"
    return errors


def validate_card_details(card: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    number = card.get("cardNumber") or ""
    if _blank(number):
        errors["cardNumber"] = "Card number is required"
    elif not re.fullmatch(r"\d{16}", re.sub(r"\s", "", number)):
        errors["cardNumber"] = "Card number must be 16 digits"

    if _blank(card.get("cardName")):
        errors["cardName"] = "Cardholder name is required"

    expiry = card.get("expiry") or ""
    if _blank(expiry):
        errors["expiry"] = "Expiry date is required"
    elif not re.fullmatch(r"\d{2}/\d{2}", expiry):
        errors["expiry"] = "Format should be MM/YY"

    cvv = card.get("cvv") or ""
    if _blank(cvv):
        errors["cvv"] = "CVV is required"
    elif not re.fullmatch(r"\d{3,4}", cvv):
        errors["cvv"] = "CVV must be 3 or 4 digits"
    return errors


class CheckoutFlow:
    """One checkout attempt over a cart.

    `save_address` is called with the address body for POST /api/addresses
    when the shopper asks to keep a new address. `sleep` and `clock` are
    the payment delay and time source.
    """

    def __init__(
        self,
        cart: Cart,
        user: Optional[Dict[str, Any]] = None,
        saved_addresses: Iterable[Dict[str, Any]] = (),
        save_address: Optional[Callable[[Dict[str, Any]], Any]] = None,
        cart_store: Optional[CartStore] = None,
        payment_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.cart = cart
        self.user = user
        self.saved_addresses: List[Dict[str, Any]] = list(saved_addresses)
        self.save_address = save_address
        self.cart_store = cart_store
        self.payment_delay = settings.PAYMENT_DELAY_SECONDS if payment_delay is None else payment_delay
        self.sleep = sleep
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.step = Step.REVIEW
        self.shipping_address: Dict[str, Any] = {f: "" for f in SHIPPING_FIELDS}
        if user:
            self.shipping_address["email"] = user.get("email", "")
        self.shipping_errors: Dict[str, str] = {}
        self.selected_address_id: Optional[str] = None
        self.show_address_form = True
        self.delivery_option = "standard"
        self.payment_method = "card"
        self.card_errors: Dict[str, str] = {}

    def _require(self, step: Step) -> None:
        if self.step != step:
            raise StepError(f"Expected step {step.name}, currently at {self.step.name}")

    # Totals

    def subtotal(self) -> float:
        return self.cart.subtotal()

    def shipping_cost(self) -> float:
        return shipping_cost(self.delivery_option)

    def tax(self) -> float:
        return self.subtotal() * TAX_RATE

    def total(self) -> float:
        return self.subtotal() + self.shipping_cost() + self.tax()

    # Steps

    def proceed_to_shipping(self) -> None:
        self._require(Step.REVIEW)
        if self.cart.is_empty:
            raise EmptyCartError("Your cart is empty")
        self.step = Step.SHIPPING

    def select_saved_address(self, address_id: str) -> Dict[str, Any]:
        address = next((a for a in self.saved_addresses if str(a.get("_id")) == address_id), None)
        if address is None:
            raise KeyError(address_id)
        self.selected_address_id = address_id
        self.show_address_form = False
        self.shipping_address = {f: address.get(f, "") for f in SHIPPING_FIELDS}
        return self.shipping_address

    def use_new_address(self) -> None:
        self.selected_address_id = None
        self.show_address_form = True

    def submit_shipping(self, address: Optional[Dict[str, Any]] = None, save_for_later: bool = False) -> Dict[str, str]:
        """Validate the address and move on to delivery.

        Returns the field errors; an empty dict means the step advanced.
        """
        self._require(Step.SHIPPING)
        if address is not None:
            self.shipping_address.update(address)

        if self.selected_address_id and not self.show_address_form:
            self.shipping_errors = {}
        else:
            self.shipping_errors = validate_shipping_address(self.shipping_address)
        if self.shipping_errors:
            return self.shipping_errors

        if save_for_later and self.user and self.save_address:
            body = {
                "userId": self.user.get("_id"),
                **self.shipping_address,
                # First saved address becomes the default
                "isDefault": len(self.saved_addresses) == 0,
            }
            self.save_address(body)
        self.step = Step.DELIVERY
        return {}

    def choose_delivery(self, option: str) -> None:
        self._require(Step.DELIVERY)
        delivery_option(option)
        self.delivery_option = option

    def proceed_to_payment(self) -> None:
        self._require(Step.DELIVERY)
        self.step = Step.PAYMENT

    def back(self) -> None:
        # A placed order is final
        if Step.REVIEW < self.step < Step.PLACED:
            self.step = Step(self.step - 1)

    def submit_payment(self, method: str = "card", card: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._require(Step.PAYMENT)
        if method not in PAYMENT_METHODS:
            raise ValueError(f"Unknown payment method: {method}")
        self.payment_method = method
        if method == "card":
            self.card_errors = validate_card_details(card or {})
            if self.card_errors:
                raise CheckoutValidationError("Please enter valid payment details", self.card_errors)

        # Simulated payment processing
        self.sleep(self.payment_delay)

        placed_at = self.clock()
        order = {
            "orderId": f"ORD-{int(placed_at.timestamp() * 1000)}",
            "items": self.cart.to_list(),
            "shippingAddress": dict(self.shipping_address),
            "deliveryOption": self.delivery_option,
            "paymentMethod": self.payment_method,
            "total": self.total(),
            "timestamp": placed_at.isoformat(),
        }
        self.cart.clear()
        self.step = Step.PLACED
        if self.cart_store is not None:
            self.cart_store.save_last_order(order)
            self.cart_store.clear(self.user)
        logger.info("Payment accepted for %s", order["orderId"])
        return order


def order_request(order: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Body for POST /api/orders built from a placed order."""
    return {
        "userId": user.get("_id") or user.get("email"),
        "orderId": order["orderId"],
        "items": order["items"],
        "shippingAddress": order["shippingAddress"],
        "deliveryOption": order["deliveryOption"],
        "paymentMethod": order["paymentMethod"],
        "total": order["total"],
    }
