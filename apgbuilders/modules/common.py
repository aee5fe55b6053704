# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Any, Callable

from flask import flash, redirect, render_template, url_for
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..forms import FormState
from ..repository import RecordNotFound, Repository

logger = logging.getLogger(__name__)


def fetch_batch(what: str, *loaders: Callable[[], Any]) -> list | None:
    """Run every read a view needs; the first failure aborts the whole batch.

    Returns the results in order, or None after logging and flashing the
    failure. Callers fall back to their empty state.
    """
    try:
        return [load() for load in loaders]
    except SQLAlchemyError:
        logger.exception("Error fetching %s", what)
        db.session.rollback()
        flash(f"Failed to fetch {what}", "danger")
        return None


def load_or_redirect(repo: Repository, record_id: int, label: str, list_endpoint: str):
    """(row, None) when found, else (None, redirect-to-list) with a flash."""
    try:
        row = repo.get(record_id)
    except SQLAlchemyError:
        logger.exception("Error fetching %s #%s", label, record_id)
        db.session.rollback()
        flash(f"Failed to fetch {label} details", "danger")
        return None, redirect(url_for(list_endpoint))
    if row is None:
        flash(f"{label.capitalize()} not found", "danger")
        return None, redirect(url_for(list_endpoint))
    return row, None


def save_form(
    repo: Repository,
    state: FormState,
    label: str,
    list_endpoint: str,
    template: str,
    record_id: int | None = None,
    **context,
):
    """Exactly one write (insert or update), then back to the list.

    Validation errors and write failures keep the form on screen.
    """
    if not state.ok:
        flash(f"Please check the {label} details", "danger")
        return render_template(template, state=state, item_id=record_id, **context)

    try:
        if record_id is None:
            repo.create(state.values)
        else:
            repo.update(record_id, state.values)
    except RecordNotFound:
        flash(f"{label.capitalize()} not found", "danger")
        return redirect(url_for(list_endpoint))
    except SQLAlchemyError:
        logger.exception("Error saving %s", label)
        flash(f"Failed to save {label}", "danger")
        return render_template(template, state=state, item_id=record_id, **context)

    flash(f"{label.capitalize()} {'updated' if record_id else 'created'} successfully", "primary")
    return redirect(url_for(list_endpoint))
