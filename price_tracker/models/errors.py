# price_tracker/models/errors.py

"""Error taxonomy for the ingestion pipeline.

Every error carries a ``user_message`` that tells the caller which
corrective action applies: fix the URL, retry later, or sign in.
"""


class PriceTrackerError(Exception):
    """Base class for all errors surfaced by price_tracker."""

    user_message: str = "Something went wrong"

    def __init__(
        self, message: str = "", cause: BaseException | None = None,
    ) -> None:
        super().__init__(message or self.user_message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def detail(self) -> str:
        """Human-readable message including the underlying reason."""
        reason = str(self)
        if reason == self.user_message:
            return reason
        return f"{self.user_message}: {reason}"


class InputError(PriceTrackerError):
    """The caller supplied unusable input."""

    user_message = "Invalid input"


class MissingURLError(InputError):
    """No product URL was given."""

    user_message = "A product URL is required"


class AuthError(PriceTrackerError):
    """No authenticated owner is attached to the request."""

    user_message = "Not signed in"


class UnauthenticatedError(AuthError):
    """The request carries no owner identity."""

    user_message = "Not signed in, please sign in to track products"


class ExtractionError(PriceTrackerError):
    """Product data could not be read from the page."""

    user_message = "Could not read product data from this page"


class InvalidProductNameError(ExtractionError):
    """The extracted product name is missing or too short."""


class InvalidPriceError(ExtractionError):
    """The extracted price is missing, non-numeric, or not positive."""


class InvalidCurrencyError(ExtractionError):
    """The extracted currency code is missing or blank."""


class StoreError(PriceTrackerError):
    """The storage layer rejected a read or write."""

    user_message = "Could not save the product, please retry"
