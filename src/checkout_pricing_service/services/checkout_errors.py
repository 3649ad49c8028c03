"""Checkout exceptions.

Validation failures are raised before any pricing happens. Each carries a stable
``code`` the API returns to clients so they can correct the request and retry.
"""


class CheckoutError(Exception):
    """Base class for checkout failures."""

    code = "checkout-failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CheckoutValidationError(CheckoutError):
    """A checkout precondition was not met."""

    code = "invalid-checkout"


class EmptyCartError(CheckoutValidationError):
    code = "cart-empty"


class TooManyMerchantsError(CheckoutValidationError):
    code = "max-merchants-reached"

    def __init__(self, merchant_count: int, max_merchants: int) -> None:
        super().__init__(
            f"Checkout has {merchant_count} merchants but at most {max_merchants} are allowed"
        )
        self.merchant_count = merchant_count
        self.max_merchants = max_merchants


class MerchantCartMismatchError(CheckoutValidationError):
    code = "merchant-mismatch"


class DuplicateMerchantError(CheckoutValidationError):
    code = "duplicate-merchant"


class MissingDeliveryCoordinatesError(CheckoutValidationError):
    code = "address-coordinates-required"


class MissingDeliveryDetailsError(CheckoutValidationError):
    code = "missing-delivery-details"


class PaymentMethodDisabledError(CheckoutValidationError):
    code = "payment-method-disabled"


class CheckoutPersistenceError(CheckoutError):
    """The order group could not be written; nothing was persisted."""

    code = "persistence-failed"


class RestaurantInactiveError(CheckoutValidationError):
    """A restaurant in the checkout is not accepting orders."""

    code = "restaurant-unavailable"
