"""Public web blueprints. Pages are assembled in ngosite.services.pages; routes only render."""

from __future__ import annotations

from flask import current_app, render_template, request

from ngosite.services.pages import PageAssembler, PageResult
from ngosite.services.site import current_store, load_site_context


def page_assembler() -> PageAssembler:
    return PageAssembler(
        current_store(),
        load_site_context(),
        app=current_app._get_current_object(),
    )


def render_page(template: str, page: PageResult, **context):
    return render_template(template, page=page, **context)


def category_arg():
    return (request.args.get("category") or "").strip() or None
