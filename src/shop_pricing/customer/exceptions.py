"""Errors raised by customer account management."""


class CustomerError(Exception):
    """Base class for customer account failures."""


class UserNotFoundError(CustomerError, LookupError):
    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class DuplicateEmailError(CustomerError, ValueError):
    """Another account on the same domain already uses the email."""

    def __init__(self, email: str, domain_id: int):
        self.email = email
        self.domain_id = domain_id
        super().__init__(f"Email {email} is already registered on domain {domain_id}")
