"""
Customer account models.

UserData/CustomerData are the editable form data; User is the stored account.
"""
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Optional


@dataclass
class BillingAddressData:
    company_customer: bool = False
    company_name: Optional[str] = None
    company_number: Optional[str] = None
    company_tax_number: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    telephone: Optional[str] = None


@dataclass
class DeliveryAddressData:
    # A delivery address only exists when the customer filled one in
    address_filled: bool = False
    company_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    telephone: Optional[str] = None


@dataclass
class UserData:
    first_name: str
    last_name: str
    email: str
    domain_id: int
    pricing_group_id: Optional[int] = None


@dataclass
class CustomerData:
    """Everything an admin or customer form submits."""
    user_data: UserData
    billing_address_data: BillingAddressData = field(default_factory=BillingAddressData)
    delivery_address_data: DeliveryAddressData = field(default_factory=DeliveryAddressData)


@dataclass
class User:
    """A registered customer account."""
    id: int
    first_name: str
    last_name: str
    email: str
    domain_id: int
    billing_address: BillingAddressData
    delivery_address: Optional[DeliveryAddressData] = None
    pricing_group_id: Optional[int] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec='seconds'))

    def edit(self, user_data: UserData):
        """Apply editable personal data; email changes go through change_email."""
        self.first_name = user_data.first_name
        self.last_name = user_data.last_name
        self.pricing_group_id = user_data.pricing_group_id

    def edit_delivery_address(self, delivery_address_data: DeliveryAddressData):
        """Replace, create or drop the delivery address."""
        if delivery_address_data is not None and delivery_address_data.address_filled:
            self.delivery_address = replace(delivery_address_data)
        else:
            self.delivery_address = None


@dataclass
class OrderContact:
    """Contact details captured on an order, used to complete a customer's profile."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    telephone: Optional[str] = None
    company_name: Optional[str] = None
    company_number: Optional[str] = None
    company_tax_number: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    delivery_address_same_as_billing: bool = True
    delivery_first_name: Optional[str] = None
    delivery_last_name: Optional[str] = None
    delivery_company_name: Optional[str] = None
    delivery_telephone: Optional[str] = None
    delivery_street: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_postcode: Optional[str] = None
    delivery_country: Optional[str] = None


def field_names(cls) -> list[str]:
    return [f.name for f in fields(cls)]
