"""Decoding of inbound action data into typed actions.

The conversational front end attaches a short string to every button.
It is decoded exactly once, here, and the storefront dispatches on the
resulting action type.
"""

from dataclasses import dataclass

from shop.errors import UnknownActionError


@dataclass(frozen=True)
class ShowCategory:
    category_id: str


@dataclass(frozen=True)
class ShowProduct:
    product_id: str


@dataclass(frozen=True)
class AddItem:
    product_id: str


@dataclass(frozen=True)
class RemoveItem:
    product_id: str


@dataclass(frozen=True)
class Checkout:
    pass


@dataclass(frozen=True)
class ConfirmPaymentAction:
    order_id: str


@dataclass(frozen=True)
class EmptyCart:
    pass


@dataclass(frozen=True)
class MainMenu:
    pass


@dataclass(frozen=True)
class ShowFaq:
    pass


@dataclass(frozen=True)
class ContactAdmin:
    pass


_EXACT = {
    "checkout": Checkout,
    "clear_cart": EmptyCart,
    "main_menu": MainMenu,
    "faq": ShowFaq,
    "contact_admin": ContactAdmin,
}

# Longest prefix first: "confirm_payment_" must win over shorter matches
_PREFIXED = (
    ("confirm_payment_", ConfirmPaymentAction),
    ("remove_", RemoveItem),
    ("prod_", ShowProduct),
    ("cat_", ShowCategory),
    ("add_", AddItem),
)


def decode_action(data: str):
    """Turn callback data such as ``add_prod_001`` into an action object.

    Raises:
        UnknownActionError: when the data matches no known action.
    """
    if not data:
        raise UnknownActionError({"action": ["Empty action data"]})

    if data in _EXACT:
        return _EXACT[data]()

    for prefix, action_cls in _PREFIXED:
        if data.startswith(prefix) and len(data) > len(prefix):
            return action_cls(data[len(prefix):])

    raise UnknownActionError({"action": [f"Unknown action: {data}"]})
