"""
Package contract: the sellable catalogue entry.

``data_amount`` must be in the canonical ``"<integer>GB"`` form. Every
supplier converts it into its own unit, so anything else is rejected here
rather than defaulted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

# ASCII digits only; fullmatch so a trailing newline is not accepted
DATA_AMOUNT_PATTERN = re.compile(r"([0-9]+)GB")


@dataclass
class PackageSeed:
    data_amount: str
    price: Decimal
    supplier_cost: Decimal
    is_active: bool = True


def parse_gigabytes(data_amount: Any) -> int:
    """``"5GB"`` -> ``5``. Raises ValueError for anything but ``<int>GB``."""
    match = DATA_AMOUNT_PATTERN.fullmatch(data_amount) if isinstance(data_amount, str) else None
    if match is None:
        raise ValueError(f"Invalid data amount format: {data_amount!r}. Expected e.g. '5GB'.")
    return int(match.group(1))


def validate_data_amount(data_amount: Any) -> str:
    parse_gigabytes(data_amount)
    return data_amount
