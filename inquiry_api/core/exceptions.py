from typing import Iterable

REQUIRED_FIELDS_MESSAGE = "Missing required fields: fullName, companyName, email, phone"
CONFIGURATION_MISSING_MESSAGE = "Email configuration is missing"
DELIVERY_FALLBACK_MESSAGE = "Failed to send inquiry"


class InquiryError(Exception):
    """Base error for the inquiry flow.

    ``message`` is what the caller is allowed to see; ``status_code`` is the
    HTTP status the API answers with.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InquiryError):
    status_code = 400

    def __init__(self, message: str = REQUIRED_FIELDS_MESSAGE):
        super().__init__(message)


class ConfigurationError(InquiryError):
    status_code = 500

    def __init__(self, missing: Iterable[str] = ()):
        super().__init__(CONFIGURATION_MISSING_MESSAGE)
        self.missing = tuple(missing)

    def describe(self) -> str:
        """Detailed text for server logs only."""
        if not self.missing:
            return CONFIGURATION_MISSING_MESSAGE
        return f"Missing SMTP env: {', '.join(self.missing)}"


class DeliveryError(InquiryError):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or DELIVERY_FALLBACK_MESSAGE)


class DeliveryTimeoutError(DeliveryError):
    pass


class NetworkError(Exception):
    """The request never reached the server or the response was unreadable."""
