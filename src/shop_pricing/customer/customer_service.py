"""
Customer Service - registration, editing and deletion of customer accounts.
"""
import logging
from dataclasses import replace
from typing import Optional

from .exceptions import DuplicateEmailError
from .models import (
    BillingAddressData,
    CustomerData,
    DeliveryAddressData,
    OrderContact,
    User,
    UserData,
)
from .repository import UserRepository

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for managing customer accounts."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def get_user_by_id(self, user_id: int) -> User:
        return self.user_repository.get_user_by_id(user_id)

    def find_user_by_email_and_domain(self, email: str, domain_id: int) -> Optional[User]:
        return self.user_repository.find_user_by_email_and_domain(email, domain_id)

    def register(self, user_data: UserData) -> User:
        """Self-registration: empty billing address, no delivery address."""
        user = self._create_user(user_data, BillingAddressData(), None)
        self.user_repository.add(user)
        logger.info("Registered user %s on domain %s", user.id, user.domain_id)
        return user

    def create(self, customer_data: CustomerData) -> User:
        """Create an account with addresses, e.g. from the admin."""
        delivery_data = customer_data.delivery_address_data
        delivery_address = replace(delivery_data) if delivery_data and delivery_data.address_filled else None

        user = self._create_user(
            customer_data.user_data,
            replace(customer_data.billing_address_data),
            delivery_address,
        )
        self.user_repository.add(user)
        logger.info("Created user %s on domain %s", user.id, user.domain_id)
        return user

    def edit_by_admin(self, user_id: int, customer_data: CustomerData) -> User:
        """Edit personal data and addresses; admins may also change the email."""
        email = customer_data.user_data.email.strip()
        self._check_email_available(self.get_user_by_id(user_id), email)

        user = self._edit(user_id, customer_data)
        user.email = email
        self.user_repository.save(user)
        logger.info("User %s edited by admin", user.id)
        return user

    def edit_by_customer(self, user_id: int, customer_data: CustomerData) -> User:
        user = self._edit(user_id, customer_data)
        self.user_repository.save(user)
        logger.info("User %s edited own account", user.id)
        return user

    def delete(self, user_id: int):
        user = self.get_user_by_id(user_id)
        self.user_repository.remove(user)
        logger.info("Deleted user %s", user_id)

    def amend_customer_data_from_order(self, user: User, order: OrderContact) -> User:
        """Fill the blanks of a customer's profile from the contact details of an order."""
        customer_data = self._create_amended_by_order(user, order)
        user = self._edit(user.id, customer_data)
        self.user_repository.save(user)
        return user

    def _create_user(
        self,
        user_data: UserData,
        billing_address: BillingAddressData,
        delivery_address: Optional[DeliveryAddressData],
    ) -> User:
        email = user_data.email.strip()
        if self.find_user_by_email_and_domain(email, user_data.domain_id) is not None:
            raise DuplicateEmailError(email, user_data.domain_id)

        return User(
            id=self.user_repository.next_id(),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            email=email,
            domain_id=user_data.domain_id,
            billing_address=billing_address,
            delivery_address=delivery_address,
            pricing_group_id=user_data.pricing_group_id,
        )

    def _edit(self, user_id: int, customer_data: CustomerData) -> User:
        user = self.get_user_by_id(user_id)
        user.edit(customer_data.user_data)
        user.billing_address = replace(customer_data.billing_address_data)
        user.edit_delivery_address(customer_data.delivery_address_data)
        return user

    def _check_email_available(self, user: User, email: str):
        existing = self.find_user_by_email_and_domain(email, user.domain_id)
        if existing is not None and existing.id != user.id:
            raise DuplicateEmailError(email, user.domain_id)

    def _create_amended_by_order(self, user: User, order: OrderContact) -> CustomerData:
        user_data = UserData(
            first_name=user.first_name or order.first_name or '',
            last_name=user.last_name or order.last_name or '',
            email=user.email,
            domain_id=user.domain_id,
            pricing_group_id=user.pricing_group_id,
        )
        return CustomerData(
            user_data=user_data,
            billing_address_data=self._amended_billing_address(user.billing_address, order),
            delivery_address_data=self._amended_delivery_address(user.delivery_address, order),
        )

    def _amended_billing_address(self, billing: BillingAddressData, order: OrderContact) -> BillingAddressData:
        amended = replace(billing)
        # An address without a street was never filled in
        if amended.street is None:
            amended.company_customer = order.company_number is not None
            amended.company_name = order.company_name
            amended.company_number = order.company_number
            amended.company_tax_number = order.company_tax_number
            amended.street = order.street
            amended.city = order.city
            amended.postcode = order.postcode
            amended.country = order.country
        if amended.telephone is None:
            amended.telephone = order.telephone
        return amended

    def _amended_delivery_address(
        self,
        delivery: Optional[DeliveryAddressData],
        order: OrderContact,
    ) -> DeliveryAddressData:
        if delivery is not None:
            return replace(delivery)
        if order.delivery_address_same_as_billing:
            return DeliveryAddressData(address_filled=False)
        return DeliveryAddressData(
            address_filled=True,
            company_name=order.delivery_company_name,
            first_name=order.delivery_first_name,
            last_name=order.delivery_last_name,
            street=order.delivery_street,
            city=order.delivery_city,
            postcode=order.delivery_postcode,
            country=order.delivery_country,
            telephone=order.delivery_telephone,
        )
