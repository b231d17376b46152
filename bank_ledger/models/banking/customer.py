"""Customer model for banking domain."""

from dataclasses import dataclass
from datetime import date


@dataclass
class Customer:
    """Bank customer entity.

    Only the contact fields (email, phone, address) may change after
    creation. ``home_branch_id`` is the sole link between customers and
    branches; accounts are never branch-scoped directly.
    """

    customer_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    date_of_birth: date | None
    registration_date: date
    home_branch_id: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
