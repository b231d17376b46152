"""Customer generator for banking domain."""

from typing import Iterator

from bank_ledger.generators.base import BaseGenerator
from bank_ledger.models.banking import Customer


class CustomerGenerator(BaseGenerator):
    """Generate synthetic bank customers."""

    def generate(self, home_branch_id: str | None = None) -> Customer:
        """Generate a single customer.

        Parameters
        ----------
        home_branch_id : str | None
            Branch the customer banks with, if any.

        Returns
        -------
        Customer
            Generated customer.
        """
        first_name = self.fake.first_name()
        last_name = self.fake.last_name()
        return Customer(
            customer_id=self.fake.uuid4(),
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name}.{last_name}@{self.fake.free_email_domain()}".lower(),
            phone=self.fake.phone_number(),
            address=self._single_line_address(),
            date_of_birth=self.fake.date_of_birth(minimum_age=18, maximum_age=85),
            registration_date=self.fake.date_between(start_date="-5y", end_date="-1y"),
            home_branch_id=home_branch_id,
        )

    def generate_batch(self, count: int, home_branch_id: str | None = None) -> Iterator[Customer]:
        """Generate multiple customers."""
        for _ in range(count):
            yield self.generate(home_branch_id)
