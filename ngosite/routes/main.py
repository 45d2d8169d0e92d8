from __future__ import annotations

from flask import Blueprint

from ngosite.routes import category_arg, page_assembler, render_page

bp = Blueprint("main", __name__)


@bp.get("/")
def home():
    return render_page("home.html", page_assembler().home())


@bp.get("/about")
def about():
    return render_page("page.html", page_assembler().about())


@bp.get("/impact")
def impact():
    return render_page("page.html", page_assembler().impact())


@bp.get("/gallery")
def gallery():
    return render_page("page.html", page_assembler().gallery(category_arg()), filter_endpoint="main.gallery")


@bp.get("/partners")
def partners():
    return render_page("page.html", page_assembler().partners(category_arg()), filter_endpoint="main.partners")
