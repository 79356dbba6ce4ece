"""Error taxonomy for the checkout domain.

- ``CouponRejected``: a coupon failed a business rule. Deterministic, never
  retried; rendered next to the coupon field.
- ``CartStateError``: an operation is not possible in the cart's current
  state (checkout on an empty cart, mixing businesses, ...).
- ``TransientError``: a collaborator could not be reached. The caller owns
  the retry.
- ``OrderCreationFailed``: the order service refused the order.
"""

from enum import Enum

from protean.exceptions import InvalidOperationError, ValidationError


class RejectionReason(Enum):
    NOT_FOUND = "Not_Found"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"
    NOT_YET_VALID = "Not_Yet_Valid"
    BELOW_MINIMUM = "Below_Minimum"
    USAGE_LIMIT_EXCEEDED = "Usage_Limit_Exceeded"


# BELOW_MINIMUM names the amount, so its message comes from validation.below_minimum()
_REJECTION_MESSAGES = {
    RejectionReason.NOT_FOUND: "Coupon not found",
    RejectionReason.INACTIVE: "Coupon is not active",
    RejectionReason.EXPIRED: "Coupon has expired",
    RejectionReason.NOT_YET_VALID: "Coupon is not yet valid",
    RejectionReason.USAGE_LIMIT_EXCEEDED: "Coupon usage limit reached",
}


class CouponRejected(ValidationError):
    """A coupon is not eligible for the cart."""

    def __init__(self, reason: RejectionReason, message: str | None = None):
        if message is None and reason not in _REJECTION_MESSAGES:
            raise ValueError(f"{reason.name} rejection needs an explicit message")
        self.reason = reason
        self.message = message or _REJECTION_MESSAGES[reason]
        super().__init__({"coupon_code": [self.message]})


class StateErrorKind(Enum):
    EMPTY_CART = "Empty_Cart"
    CROSS_BUSINESS_MIXING = "Cross_Business_Mixing"
    NEGATIVE_TOTAL = "Negative_Total"
    COUPON_PENDING = "Coupon_Pending"
    CHECKOUT_IN_PROGRESS = "Checkout_In_Progress"


_STATE_MESSAGES = {
    StateErrorKind.EMPTY_CART: "Cart is empty",
    StateErrorKind.CROSS_BUSINESS_MIXING: "Cannot add items from different businesses",
    StateErrorKind.NEGATIVE_TOTAL: "Invalid cart total",
    StateErrorKind.COUPON_PENDING: "Coupon is still being validated",
    StateErrorKind.CHECKOUT_IN_PROGRESS: "Checkout is in progress",
}


class CartStateError(InvalidOperationError):
    """The cart cannot perform the requested operation in its current state."""

    def __init__(self, kind: StateErrorKind, message: str | None = None):
        self.kind = kind
        self.message = message or _STATE_MESSAGES[kind]
        super().__init__(self.message)


class TransientKind(Enum):
    NETWORK_UNAVAILABLE = "Network_Unavailable"
    SERVER_ERROR = "Server_Error"


class TransientError(Exception):
    """A remote collaborator failed in a way that may succeed on retry."""

    def __init__(self, kind: TransientKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class OrderCreationFailed(Exception):
    """The order collaborator refused to create the order."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
