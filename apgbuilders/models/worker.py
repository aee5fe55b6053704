from sqlalchemy import func
from ..extensions import db


class Worker(db.Model):
    __tablename__ = "workers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(180), nullable=False, index=True)
    phone = db.Column(db.String(32))
    email = db.Column(db.String(128))
    address = db.Column(db.Text)
    skill_type = db.Column(db.String(64))
    daily_rate = db.Column(db.Numeric(12, 2))
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())
