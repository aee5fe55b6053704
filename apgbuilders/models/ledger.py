from datetime import date
from sqlalchemy import func
from ..extensions import db


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.id"), nullable=False, index=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    expense_date = db.Column(db.Date, default=date.today, index=True)
    category = db.Column(db.String(64))
    receipt_url = db.Column(db.String(512))
    notes = db.Column(db.Text)
    is_credit = db.Column(db.Boolean, default=False)
    # NULL means "the whole amount"; resolved when read, never stored
    credit_amount = db.Column(db.Numeric(12, 2))
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    site = db.relationship("Site", backref=db.backref("expenses", lazy="select"))
    vendor = db.relationship("Vendor", backref=db.backref("expenses", lazy="select"))


class WorkerPayment(db.Model):
    __tablename__ = "worker_payments"

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.id"), nullable=False, index=True)
    worker_id = db.Column(db.Integer, db.ForeignKey("workers.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_date = db.Column(db.Date, default=date.today, index=True)
    days_worked = db.Column(db.Integer)
    description = db.Column(db.String(255))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    site = db.relationship("Site", backref=db.backref("payments", lazy="select"))
    worker = db.relationship("Worker", backref=db.backref("payments", lazy="select"))


class SiteIncome(db.Model):
    __tablename__ = "site_income"

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.id"), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    income_date = db.Column(db.Date, default=date.today, index=True)
    source = db.Column(db.String(128))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    site = db.relationship("Site", backref=db.backref("income", lazy="select"))
