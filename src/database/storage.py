"""
Storefront persistence using SQLAlchemy.

Postgres in production (DATABASE_URL), SQLite for local development and tests.
Fulfillment-status writes are conditional updates so that concurrent triggers
for the same order cannot both move it into ``processing``.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional
from uuid import uuid4

from sqlalchemy import create_engine, func, select, update
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.database.models import Base, Order, Package, Setting, utcnow
from src.integrations.contracts.orders import (
    DEFAULT_FEE_RATE,
    FulfillmentStatus,
    PaymentStatus,
    compute_order_totals,
    ensure_payment_transition,
    fulfillment_sources,
    new_order_reference,
    to_money,
)
from src.integrations.contracts.packages import PackageSeed, validate_data_amount

logger = logging.getLogger(__name__)

_PACKAGE_FIELDS = {"data_amount", "price", "supplier_cost", "is_active"}


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    return s


def _engine_kwargs(connection_string: str) -> Dict[str, Any]:
    if not connection_string.startswith("sqlite"):
        return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}
    kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if connection_string in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    return kwargs


class StorefrontDB:
    """
    Data access for packages, orders and settings.
    """

    def __init__(self, connection_string: str) -> None:
        connection_string = _normalize_connection_string(connection_string)
        self.engine = create_engine(connection_string, **_engine_kwargs(connection_string))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    # ------------------------------------------------------------------ #
    # Settings
    # ------------------------------------------------------------------ #
    def get_setting(self, key: str) -> Optional[str]:
        with self._session() as s:
            row = s.get(Setting, key)
            return row.value if row else None

    def upsert_setting(self, key: str, value: str) -> Setting:
        with self._session() as s:
            row = s.get(Setting, key)
            if row is None:
                row = Setting(key=key, value=value, updated_at=utcnow())
                s.add(row)
            else:
                row.value = value
                row.updated_at = utcnow()
            s.flush()
            return row

    # ------------------------------------------------------------------ #
    # Packages
    # ------------------------------------------------------------------ #
    def list_packages(self, active_only: bool = False) -> List[Package]:
        with self._session() as s:
            stmt = select(Package)
            if active_only:
                stmt = stmt.where(Package.is_active.is_(True))
            packages = list(s.execute(stmt).scalars().all())
        # "2GB" sorts after "10GB" as text
        return sorted(packages, key=lambda p: int(p.data_amount[:-2]) if p.data_amount[:-2].isdigit() else 0)

    def count_packages(self) -> int:
        with self._session() as s:
            return s.execute(select(func.count()).select_from(Package)).scalar_one()

    def get_package(self, package_id: str) -> Optional[Package]:
        with self._session() as s:
            return s.get(Package, str(package_id))

    def create_package(
        self,
        *,
        data_amount: str,
        price: Any,
        supplier_cost: Any,
        is_active: bool = True,
    ) -> Package:
        validate_data_amount(data_amount)
        with self._session() as s:
            pkg = Package(
                id=str(uuid4()),
                data_amount=data_amount,
                price=to_money(price),
                supplier_cost=to_money(supplier_cost),
                is_active=is_active,
                created_at=utcnow(),
                updated_at=utcnow(),
            )
            s.add(pkg)
            s.flush()
            s.refresh(pkg)
            return pkg

    def update_package(self, package_id: str, updates: Dict[str, Any]) -> Optional[Package]:
        if "data_amount" in updates:
            validate_data_amount(updates["data_amount"])
        with self._session() as s:
            pkg = s.get(Package, str(package_id))
            if not pkg:
                return None
            for k, v in (updates or {}).items():
                if k not in _PACKAGE_FIELDS:
                    continue
                if k in ("price", "supplier_cost"):
                    v = to_money(v)
                setattr(pkg, k, v)
            pkg.updated_at = utcnow()
            s.flush()
            s.refresh(pkg)
            return pkg

    def delete_package(self, package_id: str) -> bool:
        with self._session() as s:
            pkg = s.get(Package, str(package_id))
            if not pkg:
                return False
            s.delete(pkg)
            return True

    def seed_packages(self, seeds: Iterable[PackageSeed]) -> int:
        """Insert the catalogue only when no package exists yet. Returns the number inserted."""
        if self.count_packages() > 0:
            return 0
        inserted = 0
        for seed in seeds:
            self.create_package(
                data_amount=seed.data_amount,
                price=seed.price,
                supplier_cost=seed.supplier_cost,
                is_active=seed.is_active,
            )
            inserted += 1
        return inserted

    # ------------------------------------------------------------------ #
    # Orders
    # ------------------------------------------------------------------ #
    def create_order(
        self,
        *,
        package: Package,
        phone_number: str,
        email: str,
        fee_rate: Decimal = DEFAULT_FEE_RATE,
        reference_prefix: str = "FS",
    ) -> Order:
        amount = to_money(package.price)
        fee, total = compute_order_totals(amount, fee_rate)
        with self._session() as s:
            order = Order(
                id=str(uuid4()),
                package_id=package.id,
                phone_number=phone_number,
                email=email,
                amount=amount,
                fee=fee,
                total_amount=total,
                payment_reference=new_order_reference(reference_prefix),
                status=PaymentStatus.PENDING.value,
                fulfillment_status=FulfillmentStatus.PENDING.value,
                created_at=utcnow(),
                updated_at=utcnow(),
            )
            s.add(order)
            s.flush()
            s.refresh(order)
            return order

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._session() as s:
            return s.get(Order, str(order_id))

    def get_order_by_reference(self, reference: str) -> Optional[Order]:
        with self._session() as s:
            stmt = select(Order).where(Order.payment_reference == reference)
            return s.execute(stmt).scalar_one_or_none()

    def list_orders(self, descending: bool = True) -> List[Order]:
        with self._session() as s:
            col = Order.created_at
            stmt = select(Order).order_by(col.desc() if descending else col.asc())
            return list(s.execute(stmt).scalars().all())

    def update_payment_status(self, order_id: str, status: Any) -> Optional[Order]:
        """Move the payment lifecycle; raises InvalidTransitionError for out-of-table moves."""
        with self._session() as s:
            order = s.get(Order, str(order_id))
            if not order:
                return None
            new_status = ensure_payment_transition(order.status, status)
            if order.status != new_status.value:
                logger.info("Order %s payment status %s -> %s", order.id, order.status, new_status.value)
                order.status = new_status.value
                order.updated_at = utcnow()
            s.flush()
            s.refresh(order)
            return order

    def delete_order(self, order_id: str) -> bool:
        with self._session() as s:
            order = s.get(Order, str(order_id))
            if not order:
                return False
            s.delete(order)
            return True

    # ------------------------------------------------------------------ #
    # Fulfillment transitions (conditional updates)
    # ------------------------------------------------------------------ #
    def claim_for_fulfillment(self, order_id: str) -> bool:
        """
        pending|failed -> processing in a single UPDATE. Returns True only for the
        caller whose update actually changed the row.
        """
        return self._transition_fulfillment(order_id, FulfillmentStatus.PROCESSING)

    def complete_fulfillment(self, order_id: str, *, supplier: Optional[str], supplier_reference: Optional[str]) -> bool:
        return self._finish_fulfillment(
            order_id,
            FulfillmentStatus.FULFILLED,
            fulfillment_error=None,
            supplier=supplier,
            supplier_reference=supplier_reference,
        )

    def fail_fulfillment(self, order_id: str, *, error: str, supplier: Optional[str] = None) -> bool:
        values: Dict[str, Any] = {"fulfillment_error": error}
        if supplier is not None:
            values["supplier"] = supplier
        return self._finish_fulfillment(order_id, FulfillmentStatus.FAILED, **values)

    def _finish_fulfillment(self, order_id: str, target: FulfillmentStatus, **values: Any) -> bool:
        changed = self._transition_fulfillment(order_id, target, **values)
        if not changed:
            logger.warning("Order %s was not in processing; fulfillment result %s not recorded", order_id, target.value)
        return changed

    def _transition_fulfillment(self, order_id: str, target: FulfillmentStatus, **values: Any) -> bool:
        # Guarded by FULFILLMENT_TRANSITIONS: only rows in a state allowed to move into target change
        sources = [st.value for st in fulfillment_sources(target)]
        stmt = (
            update(Order)
            .where(Order.id == str(order_id), Order.fulfillment_status.in_(sources))
            .values(fulfillment_status=target.value, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        with self._session() as s:
            return s.execute(stmt).rowcount == 1
