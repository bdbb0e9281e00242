"""Domain-specific exceptions"""

from typing import List


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InputValidationError(DomainException):
    """Assessment input violated one or more field constraints"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")


class WebhookDeliveryError(DomainException):
    """Webhook destination rejected the payload or was unreachable"""

    pass
