# -*- coding: utf-8 -*-
from datetime import datetime, date
from flask import Flask, render_template

from .config import Config, ensure_instance
from .extensions import db, migrate
from .logging_setup import configure_logging

# blueprints
from .modules.dashboard import bp as dashboard_bp
from .modules.sites import bp as sites_bp
from .modules.vendors import bp as vendors_bp
from .modules.workers import bp as workers_bp
from .modules.expenses import bp as expenses_bp
from .modules.worker_payments import bp as worker_payments_bp
from .modules.income import bp as income_bp

from .cli import register_cli


def create_app(config_object=None):
    app = Flask(
        __name__,
        instance_relative_config=True,
        template_folder="templates",
        static_folder="static",
    )
    app.config.from_object(config_object or Config)
    ensure_instance(app)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)

    # --- jinja filters ---
    @app.template_filter("fmt_date")
    def fmt_date(value, fmt="%d %b %Y"):
        if value in (None, ""):
            return ""
        if isinstance(value, (datetime, date)):
            return value.strftime(fmt)
        try:
            return date.fromisoformat(str(value)[:10]).strftime(fmt)
        except ValueError:
            return str(value)

    @app.template_filter("fmt_money")
    def fmt_money(v):
        if v in (None, ""):
            return "0"
        try:
            x = float(v)
        except (TypeError, ValueError):
            return str(v)
        # whole amounts without decimals
        if x.is_integer():
            return f"{int(x):,}"
        return f"{x:,.2f}"

    @app.context_processor
    def inject_currency():
        return {"currency": app.config.get("CURRENCY_SYMBOL", "₹")}

    # --- blueprints ---
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(sites_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(workers_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(worker_payments_bp)
    app.register_blueprint(income_bp)

    @app.errorhandler(404)
    def not_found(_e):
        return render_template("not_found.html"), 404

    register_cli(app)
    return app
