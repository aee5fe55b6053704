# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from .extensions import db
from .models import Site, Vendor, Worker, Expense, WorkerPayment, SiteIncome

logger = logging.getLogger(__name__)

# signed 64-bit INTEGER primary keys
MAX_ID = 2**63 - 1


class RecordNotFound(LookupError):
    """Update/delete addressed an id that is not in the table."""


class Repository:
    """One table: select / get / count / create / update / delete."""

    model: Any = None

    def __init__(self, session=None) -> None:
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    @property
    def label(self) -> str:
        return self.model.__tablename__

    # ------------ reads ----------------------------------------------------------
    def query(self, joins: tuple[str, ...] = ()):
        q = self.session.query(self.model)
        if joins:
            q = q.options(*[joinedload(getattr(self.model, rel)) for rel in joins])
        return q

    def select(
        self,
        order_by: str | None = None,
        descending: bool = False,
        joins: tuple[str, ...] = (),
        limit: int | None = None,
        **filters,
    ) -> list:
        q = self.query(joins).filter_by(**filters)
        if order_by:
            col = getattr(self.model, order_by)
            q = q.order_by(col.desc() if descending else col.asc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def get(self, record_id):
        if not 0 < record_id <= MAX_ID:
            return None
        return self.session.get(self.model, record_id)

    def count(self, **filters) -> int:
        return self.query().filter_by(**filters).count()

    def list_newest(self) -> list:
        m = self.model
        return self.query().order_by(m.created_at.desc(), m.id.desc()).all()

    # ------------ writes ---------------------------------------------------------
    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def create(self, values: dict[str, Any]):
        obj = self.model(**values)
        self.session.add(obj)
        self._commit()
        logger.info("%s: created id=%s", self.label, obj.id)
        return obj

    def update(self, record_id, values: dict[str, Any]):
        obj = self.get(record_id)
        if obj is None:
            raise RecordNotFound(f"{self.label} #{record_id}")
        for key, value in values.items():
            setattr(obj, key, value)
        self._commit()
        logger.info("%s: updated id=%s", self.label, record_id)
        return obj

    def delete(self, record_id) -> None:
        obj = self.get(record_id)
        if obj is None:
            raise RecordNotFound(f"{self.label} #{record_id}")
        self.session.delete(obj)
        self._commit()
        logger.info("%s: deleted id=%s", self.label, record_id)


class SiteRepository(Repository):
    model = Site

    def list_for_select(self) -> list:
        return self.select(order_by="name")

    def list_with_ledgers(self) -> list:
        """Sites with their expenses, payments and income loaded in the same read."""
        return (
            self.query()
            .options(selectinload(Site.expenses), selectinload(Site.payments), selectinload(Site.income))
            .order_by(Site.name.asc())
            .all()
        )


class VendorRepository(Repository):
    model = Vendor

    def list_for_select(self) -> list:
        return self.select(order_by="name")


class WorkerRepository(Repository):
    model = Worker

    def list_for_select(self) -> list:
        return self.select(order_by="name")


class ExpenseRepository(Repository):
    model = Expense

    def list_with_relations(self) -> list:
        return self.select(order_by="expense_date", descending=True, joins=("site", "vendor"))

    def for_site(self, site_id) -> list:
        return self.select(site_id=site_id)

    def for_vendor(self, vendor_id) -> list:
        return self.select(vendor_id=vendor_id)


class WorkerPaymentRepository(Repository):
    model = WorkerPayment

    def list_with_relations(self) -> list:
        return self.select(order_by="payment_date", descending=True, joins=("site", "worker"))

    def for_site(self, site_id) -> list:
        return self.select(site_id=site_id)

    def for_worker(self, worker_id) -> list:
        return self.select(worker_id=worker_id)


class SiteIncomeRepository(Repository):
    model = SiteIncome

    def list_with_relations(self) -> list:
        return self.select(order_by="income_date", descending=True, joins=("site",))

    def for_site(self, site_id) -> list:
        return self.select(site_id=site_id)
