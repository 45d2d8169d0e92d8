from __future__ import annotations

from flask import Blueprint

from ngosite.routes import category_arg, page_assembler, render_page

bp = Blueprint("content", __name__)


@bp.get("/programs")
def programs():
    page = page_assembler().programs(category_arg())
    return render_page("page.html", page, filter_endpoint="content.programs")


@bp.get("/programs/<slug>")
def program_detail(slug: str):
    return render_page("detail/program.html", page_assembler().program_detail(slug))


@bp.get("/campaigns")
def campaigns():
    return render_page("page.html", page_assembler().campaigns())


@bp.get("/campaigns/<slug>")
def campaign_detail(slug: str):
    return render_page("detail/campaign.html", page_assembler().campaign_detail(slug))


@bp.get("/events")
def events():
    return render_page("page.html", page_assembler().events())


@bp.get("/events/<slug>")
def event_detail(slug: str):
    return render_page("detail/event.html", page_assembler().event_detail(slug))


@bp.get("/blog")
def blog():
    page = page_assembler().blog(category_arg())
    return render_page("page.html", page, filter_endpoint="content.blog")


@bp.get("/blog/<slug>")
def blog_detail(slug: str):
    return render_page("detail/post.html", page_assembler().blog_detail(slug))
