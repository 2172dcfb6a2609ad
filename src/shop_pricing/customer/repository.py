"""
User Repository - customer account storage.

Accounts are kept in memory and, when a CSV path is given, written back to
users.csv after every change.
"""
import csv
from dataclasses import fields
from pathlib import Path
from typing import Optional

from .exceptions import UserNotFoundError
from .models import BillingAddressData, DeliveryAddressData, User, field_names

USER_COLUMNS = ['id', 'first_name', 'last_name', 'email', 'domain_id', 'pricing_group_id', 'created_at']
BILLING_COLUMNS = [f"billing_{name}" for name in field_names(BillingAddressData)]
DELIVERY_COLUMNS = [f"delivery_{name}" for name in field_names(DeliveryAddressData)]


def _bool_to_csv(value: bool) -> str:
    return 'true' if value else 'false'


def _address_to_row(prefix: str, address) -> dict:
    row = {}
    for f in fields(type(address)):
        value = getattr(address, f.name)
        if isinstance(value, bool):
            row[f"{prefix}{f.name}"] = _bool_to_csv(value)
        else:
            row[f"{prefix}{f.name}"] = value or ''
    return row


def _address_from_row(prefix: str, cls, row: dict):
    values = {}
    for f in fields(cls):
        raw = row.get(f"{prefix}{f.name}", '') or ''
        if f.type is bool or f.type == 'bool':
            values[f.name] = raw.lower() == 'true'
        else:
            values[f.name] = raw or None
    return cls(**values)


def user_to_csv_row(user: User) -> dict:
    """Flatten a user and its addresses into one CSV row."""
    row = {
        'id': str(user.id),
        'first_name': user.first_name,
        'last_name': user.last_name,
        'email': user.email,
        'domain_id': str(user.domain_id),
        'pricing_group_id': str(user.pricing_group_id) if user.pricing_group_id is not None else '',
        'created_at': user.created_at,
    }
    row.update(_address_to_row('billing_', user.billing_address))
    if user.delivery_address is not None:
        row.update(_address_to_row('delivery_', user.delivery_address))
    else:
        row.update({col: '' for col in DELIVERY_COLUMNS})
    return row


def user_from_csv_row(row: dict) -> User:
    delivery_address = None
    if (row.get('delivery_address_filled') or '').lower() == 'true':
        delivery_address = _address_from_row('delivery_', DeliveryAddressData, row)

    return User(
        id=int(row['id']),
        first_name=row.get('first_name', ''),
        last_name=row.get('last_name', ''),
        email=row.get('email', ''),
        domain_id=int(row['domain_id']),
        billing_address=_address_from_row('billing_', BillingAddressData, row),
        delivery_address=delivery_address,
        pricing_group_id=int(row['pricing_group_id']) if row.get('pricing_group_id') else None,
        created_at=row.get('created_at', ''),
    )


class UserRepository:
    """Stores customer accounts by id."""

    CSV_COLUMNS = USER_COLUMNS + BILLING_COLUMNS + DELIVERY_COLUMNS

    def __init__(self, users_csv_path: Optional[Path] = None):
        self.users_csv_path = Path(users_csv_path) if users_csv_path else None
        self._users: dict[int, User] = {}
        self._load_users()

    def _load_users(self):
        if self.users_csv_path is None or not self.users_csv_path.exists():
            return
        with open(self.users_csv_path, 'r', encoding='utf-8') as f:
            reader = csv.DictReader(f)
            for row in reader:
                if not row.get('id'):
                    continue
                user = user_from_csv_row(row)
                self._users[user.id] = user

    def _write_users(self):
        """Write users back to CSV."""
        if self.users_csv_path is None:
            return
        with open(self.users_csv_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()
            for user in self.list_users():
                writer.writerow(user_to_csv_row(user))

    def next_id(self) -> int:
        return max(self._users, default=0) + 1

    def list_users(self, domain_id: Optional[int] = None) -> list[User]:
        users = sorted(self._users.values(), key=lambda u: u.id)
        if domain_id is not None:
            users = [u for u in users if u.domain_id == domain_id]
        return users

    def get_user_by_id(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def find_user_by_email_and_domain(self, email: str, domain_id: int) -> Optional[User]:
        email = (email or '').strip().lower()
        for user in self.list_users(domain_id):
            if user.email.lower() == email:
                return user
        return None

    def add(self, user: User) -> User:
        if user.id in self._users:
            raise ValueError(f"User with ID '{user.id}' already exists")
        self._users[user.id] = user
        self._write_users()
        return user

    def save(self, user: User) -> User:
        """Persist changes made to an existing user."""
        self.get_user_by_id(user.id)
        self._users[user.id] = user
        self._write_users()
        return user

    def remove(self, user: User):
        self.get_user_by_id(user.id)
        del self._users[user.id]
        self._write_users()
