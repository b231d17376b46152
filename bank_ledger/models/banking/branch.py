"""Branch model for banking domain."""

from dataclasses import dataclass


@dataclass
class Branch:
    """Bank branch entity."""

    branch_id: str
    branch_name: str
    address: str
    city: str
    manager_name: str
