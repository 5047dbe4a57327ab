"""Pure views over cart and wishlist state: counts, membership and inquiry messages."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

if TYPE_CHECKING:
    from furnisync.domain.model import CartState, WishlistState

WHATSAPP_BASE_URL: Final[str] = "https://wa.me/"
MAX_MESSAGE_LENGTH: Final[int] = 2000
INQUIRY_GREETING: Final[str] = "Hello! I'm interested in the following products:\n\n"
INQUIRY_CLOSING: Final[str] = "\n\nPlease provide pricing and availability details."
PRODUCT_INQUIRY_TEMPLATE: Final[str] = (
    "Hi, I'm interested in {title} from Dipak Steel Furniture. Please share more details."
)
CURRENCY_SYMBOL: Final[str] = "₹"

# characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE: Final[str] = "!'()*"


def total_item_count(cart: CartState) -> int:
    return sum(line.quantity for line in cart)


def is_in_cart(cart: CartState, item_id: str) -> bool:
    return item_id in cart


def is_in_wishlist(wishlist: WishlistState, item_id: str) -> bool:
    return item_id in wishlist


def cart_subtotal(cart: CartState) -> Decimal:
    """Sum of ``price * quantity`` over lines whose snapshot carries a price."""

    return sum(
        (line.item.price * line.quantity for line in cart if line.item.price is not None),
        start=Decimal(0),
    )


def build_outbound_summary(cart: CartState) -> str:
    """Render the cart as an enumerated inquiry message.

    One ``"{n}. {title} ({category}) - Qty: {quantity}"`` line per cart line, wrapped
    in the greeting and closing text and cut to ``MAX_MESSAGE_LENGTH`` characters.
    """

    product_list = "\n".join(
        f"{index}. {line.item.title} ({line.item.category_name}) - Qty: {line.quantity}"
        for index, line in enumerate(cart, start=1)
    )
    message = f"{INQUIRY_GREETING}{product_list}{INQUIRY_CLOSING}"
    return message[:MAX_MESSAGE_LENGTH]


def encode_uri_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def build_whatsapp_url(phone_number: str, message: str) -> str:
    return f"{WHATSAPP_BASE_URL}{phone_number}?text={encode_uri_component(message)}"


def build_outbound_url(cart: CartState, phone_number: str) -> str | None:
    """Messaging link carrying the cart summary, or ``None`` for an empty cart."""

    if cart.is_empty:
        return None
    return build_whatsapp_url(phone_number, build_outbound_summary(cart))


def build_product_inquiry_url(title: str, phone_number: str) -> str:
    return build_whatsapp_url(phone_number, PRODUCT_INQUIRY_TEMPLATE.format(title=title))


def format_currency(amount: Decimal | float | None) -> str:
    """Format rupees the way the storefront shows prices: ``₹1,23,456``, no paise."""

    if amount is None:
        return f"{CURRENCY_SYMBOL}0.00"
    value = Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(abs(int(value))))}"


def _group_indian(digits: str) -> str:
    # lakh/crore grouping: last three digits, then pairs
    if len(digits) <= 3:  # noqa: PLR2004
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:  # noqa: PLR2004
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])
