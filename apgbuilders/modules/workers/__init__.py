# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, render_template, request

from ...forms import FormState, WORKER_FIELDS, worker_form
from ...reporting import WorkerSummary, worker_summary
from ...repository import WorkerPaymentRepository, WorkerRepository
from ..common import fetch_batch, load_or_redirect, save_form

bp = Blueprint("workers", __name__, url_prefix="/workers")

workers = WorkerRepository()
payments = WorkerPaymentRepository()

FORM = "workers/form.html"


@bp.route("", methods=["GET"])
def index():
    batch = fetch_batch("workers", workers.list_newest)
    return render_template("workers/index.html", workers=batch[0] if batch else [])


@bp.route("/view/<int:worker_id>", methods=["GET"])
def view(worker_id: int):
    worker, back = load_or_redirect(workers, worker_id, "worker", "workers.index")
    if back:
        return back
    batch = fetch_batch("worker details", lambda: payments.for_worker(worker_id))
    summary = worker_summary(worker, batch[0]) if batch else WorkerSummary()
    return render_template("workers/view.html", worker=worker, stats=summary)


@bp.route("/add", methods=["GET", "POST"])
def add():
    if request.method == "GET":
        return render_template(FORM, state=FormState.initial(WORKER_FIELDS), item_id=None)
    return save_form(workers, worker_form(request.form), "worker", "workers.index", FORM)


@bp.route("/edit/<int:worker_id>", methods=["GET", "POST"])
def edit(worker_id: int):
    worker, back = load_or_redirect(workers, worker_id, "worker", "workers.index")
    if back:
        return back
    if request.method == "GET":
        return render_template(FORM, state=FormState.from_row(worker, WORKER_FIELDS), item_id=worker_id)
    return save_form(workers, worker_form(request.form), "worker", "workers.index", FORM, record_id=worker_id)
