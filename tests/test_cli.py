from sqlalchemy import func, select

from ngosite.extensions import db
from ngosite.models import Campaign, HeroSection, Program, Website


def _count(app, model):
    with app.app_context():
        return db.session.execute(select(func.count()).select_from(model)).scalar_one()


def test_seed_site_is_idempotent(app):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["seed-site"])
    assert first.exit_code == 0, first.output
    second = runner.invoke(args=["seed-site", "--name", "DUAF Trust"])
    assert second.exit_code == 0, second.output

    assert _count(app, Website) == 1
    assert _count(app, HeroSection) == 1
    with app.app_context():
        website = db.session.execute(select(Website)).scalar_one()
        assert website.name == "DUAF Trust"
        assert website.payment_handle == "duaf@upi"


def test_seed_demo_fills_public_pages(app, client):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["demo", "seed-demo", "--campaigns", "3", "--programs", "2", "--events", "2", "--posts", "2"])
    assert result.exit_code == 0, result.output
    assert _count(app, Campaign) == 3
    assert _count(app, Program) == 2

    body = client.get("/campaigns").get_data(as_text=True)
    assert body.count('data-card="campaign"') == 3

    again = runner.invoke(args=["demo", "seed-demo", "--campaigns", "1", "--programs", "0", "--events", "0", "--posts", "0", "--clear"])
    assert again.exit_code == 0, again.output
    assert _count(app, Campaign) == 1
