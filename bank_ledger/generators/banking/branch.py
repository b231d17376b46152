"""Branch generator for banking domain."""

from typing import Iterator

from bank_ledger.generators.base import BaseGenerator
from bank_ledger.models.banking import Branch


class BranchGenerator(BaseGenerator):
    """Generate synthetic bank branches."""

    def generate(self) -> Branch:
        """Generate a single branch.

        Returns
        -------
        Branch
            Generated branch.
        """
        city = self.fake.city()
        return Branch(
            branch_id=self.fake.uuid4(),
            branch_name=f"{city} {self.fake.street_name()} Branch",
            address=self._single_line_address(),
            city=city,
            manager_name=self.fake.name(),
        )

    def generate_batch(self, count: int) -> Iterator[Branch]:
        """Generate multiple branches."""
        for _ in range(count):
            yield self.generate()
