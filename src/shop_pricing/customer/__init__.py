"""Customer subpackage - customer account management."""
from .customer_service import CustomerService
from .exceptions import CustomerError, DuplicateEmailError, UserNotFoundError
from .models import BillingAddressData, CustomerData, DeliveryAddressData, OrderContact, User, UserData
from .repository import UserRepository

__all__ = [
    'CustomerService', 'UserRepository',
    'CustomerError', 'DuplicateEmailError', 'UserNotFoundError',
    'BillingAddressData', 'CustomerData', 'DeliveryAddressData', 'OrderContact', 'User', 'UserData',
]
