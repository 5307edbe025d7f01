# storecart/domain/errors.py


class CartError(Exception):
    """Base class for cart domain errors."""


class NotFoundError(CartError, LookupError):
    """Store, product offering, cart or line item does not exist."""


class InvalidArgumentError(CartError, ValueError):
    """Rejected input, raised before anything is persisted."""


class ConflictError(CartError, RuntimeError):
    """Cart is busy with another request of the same owner."""
