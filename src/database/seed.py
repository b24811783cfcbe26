"""
Default MTN bundle catalogue, inserted on first startup when the packages table is empty.
"""

from decimal import Decimal
from typing import List

from src.integrations.contracts.orders import to_money
from src.integrations.contracts.packages import PackageSeed

# Wholesale cost is seeded at 70% of the customer price; admins adjust it per supplier.
SEED_COST_RATIO = Decimal("0.70")

_SEED_PRICES = [
    ("1GB", "5.00"),
    ("2GB", "10.00"),
    ("3GB", "14.00"),
    ("4GB", "21.00"),
    ("5GB", "23.00"),
    ("10GB", "46.00"),
    ("15GB", "69.00"),
    ("20GB", "92.00"),
    ("25GB", "115.00"),
    ("30GB", "138.00"),
    ("35GB", "161.00"),
    ("40GB", "184.00"),
    ("45GB", "207.00"),
    ("50GB", "230.00"),
    ("75GB", "345.00"),
    ("80GB", "368.00"),
    ("100GB", "460.00"),
]


def default_packages() -> List[PackageSeed]:
    return [
        PackageSeed(
            data_amount=data_amount,
            price=to_money(price),
            supplier_cost=to_money(Decimal(price) * SEED_COST_RATIO),
        )
        for data_amount, price in _SEED_PRICES
    ]
