# -*- coding: utf-8 -*-
from __future__ import annotations

import io

from flask import Blueprint, current_app, redirect, render_template, send_file, url_for

from ...reporting import (
    DashboardStats,
    dashboard_summary,
    export_filename,
    export_summary_csv,
    export_summary_xlsx,
)
from ...repository import (
    ExpenseRepository,
    SiteIncomeRepository,
    SiteRepository,
    VendorRepository,
    WorkerPaymentRepository,
    WorkerRepository,
)
from ..common import fetch_batch

bp = Blueprint("dashboard", __name__)

sites = SiteRepository()
vendors = VendorRepository()
workers = WorkerRepository()
expenses = ExpenseRepository()
payments = WorkerPaymentRepository()
income = SiteIncomeRepository()

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@bp.route("/", methods=["GET"])
def index():
    # all reads first; any failure leaves the dashboard at zero
    batch = fetch_batch(
        "dashboard stats",
        sites.select,
        vendors.select,
        workers.select,
        expenses.list_with_relations,
        payments.select,
        income.select,
    )
    if batch:
        stats = dashboard_summary(*batch, limit=current_app.config.get("RECENT_EXPENSES_LIMIT", 5))
    else:
        stats = DashboardStats()
    return render_template("dashboard.html", stats=stats)


def _ledgers():
    batch = fetch_batch("site summary", sites.list_with_ledgers)
    return batch[0] if batch else None


@bp.route("/export.csv", methods=["GET"])
def export_csv():
    rows = _ledgers()
    if rows is None:
        return redirect(url_for("dashboard.index"))
    data = export_summary_csv(rows).encode("utf-8")
    return send_file(
        io.BytesIO(data),
        mimetype="text/csv",
        as_attachment=True,
        download_name=export_filename("csv"),
    )


@bp.route("/export.xlsx", methods=["GET"])
def export_xlsx():
    rows = _ledgers()
    if rows is None:
        return redirect(url_for("dashboard.index"))
    return send_file(
        io.BytesIO(export_summary_xlsx(rows)),
        mimetype=XLSX_MIME,
        as_attachment=True,
        download_name=export_filename("xlsx"),
    )
