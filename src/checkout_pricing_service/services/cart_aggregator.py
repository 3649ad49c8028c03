"""Grouping of flat cart lines into per-merchant carts."""

import logging
from dataclasses import dataclass
from typing import Iterable

from checkout_pricing_service.models.cart_models import CartItem, CartLineItem, MerchantCart
from checkout_pricing_service.models.settings_models import RateSettings
from checkout_pricing_service.services.checkout_errors import TooManyMerchantsError

logger = logging.getLogger(__name__)

REASON_SINGLE_MERCHANT_ONLY = "single-merchant-only"
REASON_MAX_MERCHANTS_REACHED = "max-merchants-reached"


@dataclass(frozen=True)
class CartAdmission:
    """Whether items from a restaurant may join the customer's carts.

    Attributes:
        allowed: True if the restaurant can be added
        reason: Machine-readable denial reason, None when allowed
    """

    allowed: bool
    reason: str | None = None


def group_by_merchant(line_items: Iterable[CartLineItem]) -> dict[str, MerchantCart]:
    """Group cart lines into one MerchantCart per restaurant.

    Merchants appear in the order their first item was seen, and items keep
    their insertion order inside each cart. The restaurant name and markup come
    from the first line seen for that restaurant.

    Args:
        line_items: Flat cart lines, each tagged with its restaurant

    Returns:
        Mapping of restaurant_id to MerchantCart, empty for empty input
    """
    carts: dict[str, MerchantCart] = {}

    for line in line_items:
        cart = carts.get(line.restaurant_id)
        if cart is None:
            cart = MerchantCart(
                restaurant_id=line.restaurant_id,
                restaurant_name=line.restaurant_name,
                markup_percent=line.markup_percent,
            )
            carts[line.restaurant_id] = cart
        cart.items.append(line.to_cart_item())

    return carts


def merge_duplicate_items(cart: MerchantCart) -> MerchantCart:
    """Collapse identical lines into one line with the combined quantity.

    Lines are identical when they share the menu item, the set of selected
    options (in any order) and the special instructions. The merged line keeps
    the position of its first occurrence.
    """
    merged: dict[tuple, CartItem] = {}

    for item in cart.items:
        key = (item.menu_item_id, item.option_signature(), item.special_instructions)
        existing = merged.get(key)
        if existing is None:
            merged[key] = item.model_copy()
        else:
            merged[key] = existing.model_copy(update={"quantity": existing.quantity + item.quantity})

    return cart.model_copy(update={"items": list(merged.values())})


def can_add_from_restaurant(
    existing_restaurant_ids: list[str],
    restaurant_id: str,
    settings: RateSettings,
) -> CartAdmission:
    """Decide whether a customer may start a cart for another restaurant.

    Args:
        existing_restaurant_ids: Restaurants the customer already has carts for
        restaurant_id: Restaurant the customer is adding from
        settings: Current rate settings

    Returns:
        CartAdmission with the decision and a denial reason if any
    """
    if restaurant_id in existing_restaurant_ids or not existing_restaurant_ids:
        return CartAdmission(allowed=True)

    if not settings.allow_multi_merchant_checkout:
        return CartAdmission(allowed=False, reason=REASON_SINGLE_MERCHANT_ONLY)

    if len(existing_restaurant_ids) >= settings.max_merchants_per_order:
        return CartAdmission(allowed=False, reason=REASON_MAX_MERCHANTS_REACHED)

    return CartAdmission(allowed=True)


def enforce_merchant_cap(
    carts: dict[str, MerchantCart],
    max_merchants: int,
    evict_oldest: bool = True,
) -> dict[str, MerchantCart]:
    """Bring a set of carts within the merchant cap.

    Args:
        carts: Merchant carts in insertion order, oldest first
        max_merchants: Maximum number of carts allowed
        evict_oldest: Drop the oldest carts instead of rejecting

    Returns:
        Carts that fit within the cap, in their original order

    Raises:
        TooManyMerchantsError: If over the cap and eviction is disabled
    """
    if len(carts) <= max_merchants:
        return dict(carts)

    if not evict_oldest:
        raise TooManyMerchantsError(len(carts), max_merchants)

    overflow = len(carts) - max_merchants
    evicted = list(carts)[:overflow]
    logger.info(f"Evicting oldest merchant carts to fit cap of {max_merchants}: {evicted}")

    return {rid: cart for rid, cart in carts.items() if rid not in evicted}
