from datetime import date, timedelta
from decimal import Decimal

import click
from faker import Faker
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from ngosite.extensions import db, safe_commit
from ngosite.services.content import utcnow

fake = Faker()

demo_cli = AppGroup("demo", help="Demo content for local development.")

PROGRAM_CATEGORIES = ["Education", "Health", "Livelihood", "Environment"]
POST_CATEGORIES = ["Field Notes", "Announcements", "Stories"]
GALLERY_CATEGORIES = ["Events", "Programs", "Volunteers"]
PARTNER_CATEGORIES = ["Corporate", "Foundation", "Government"]


def _site_key() -> str:
    return current_app.config.get("SITE_KEY") or "ngo"


# ---------- seed-site ----------
@click.command("seed-site")
@click.option("--name", default=None, help="Display name (defaults to SITE_NAME).")
@with_appcontext
def seed_site(name):
    """Create or update the settings, contact and hero rows for SITE_KEY."""
    from ngosite.models import ContactInfo, HeroSection, Website

    cfg = current_app.config
    site = _site_key()
    name = name or cfg.get("SITE_NAME") or site.upper()

    website = Website.query.filter_by(site=site).first()
    if website:
        click.echo(f"🔁 Updating website settings for {site}")
    else:
        website = Website(site=site, name=name)
        db.session.add(website)
        click.echo(f"✨ Created website settings for {site}")
    website.name = name
    website.payment_handle = website.payment_handle or cfg.get("PAYMENT_HANDLE") or None
    website.payment_payee_name = website.payment_payee_name or cfg.get("PAYMENT_PAYEE_NAME") or name
    website.currency = (cfg.get("PAYMENT_CURRENCY") or "INR").upper()

    if not ContactInfo.query.filter_by(site=site).first():
        db.session.add(ContactInfo(site=site, email=f"hello@{site}.org"))
        click.echo("   → Added contact info")

    if not HeroSection.query.filter_by(site=site).first():
        db.session.add(
            HeroSection(
                site=site,
                title=f"Welcome to {name}",
                subtitle="Together we build stronger communities.",
                cta_label="Get Involved",
                cta_url="/get-involved",
            )
        )
        click.echo("   → Added hero section")

    if safe_commit():
        click.secho("✅ Site seeded!", fg="bright_green", bold=True)
    else:
        raise click.ClickException("Seeding failed; see the log for details.")


# ---------- demo seed-demo ----------
@demo_cli.command("seed-demo")
@click.option("--campaigns", default=4, show_default=True)
@click.option("--programs", default=6, show_default=True)
@click.option("--events", default=6, show_default=True)
@click.option("--posts", default=6, show_default=True)
@click.option("--clear", is_flag=True)
def seed_demo(campaigns, programs, events, posts, clear):
    """Seed demo content for every public page."""
    site = _site_key()
    if clear:
        _clear_content(site)
    _seed_campaigns(site, campaigns)
    _seed_programs(site, programs)
    _seed_events(site, events)
    _seed_posts(site, posts)
    _seed_showcase(site)
    if safe_commit():
        click.secho("✅ Demo content seeded!", fg="bright_green", bold=True)
    else:
        raise click.ClickException("Seeding failed; see the log for details.")


# ---------- Helpers ----------
def _content_models():
    from ngosite.models import (AboutSection, BlogPost, Campaign, CaseStudy,
                                Event, GalleryImage, ImpactStat, Partner,
                                Program, Report, TeamMember, Testimonial,
                                TimelineItem)

    return (
        Campaign, Program, Event, BlogPost, TeamMember, Partner, Testimonial,
        ImpactStat, GalleryImage, TimelineItem, CaseStudy, Report, AboutSection,
    )


def _clear_content(site):
    click.secho("🧹 Clearing demo content…", fg="yellow")
    for model in _content_models():
        deleted = model.query.filter_by(site=site).delete()
        click.secho(f"  ↳ {deleted} {model.__name__} removed", fg="yellow")
    db.session.commit()


def _slug():
    return f"{fake.unique.slug()}-{fake.random_int(100, 999)}"


def _seed_campaigns(site, count):
    from ngosite.models import Campaign

    for i in range(count):
        goal = Decimal(fake.random_int(50, 500) * 1000)
        db.session.add(
            Campaign(
                site=site,
                slug=_slug(),
                title=f"{fake.catch_phrase()} Fund",
                short_description=fake.sentence(nb_words=14),
                long_description="\n\n".join(fake.paragraphs(nb=3)),
                goal_amount=goal,
                raised_amount=(goal * Decimal(fake.random_int(5, 120)) / 100).quantize(Decimal("0.01")),
                is_active=i % 3 != 2,
            )
        )


def _seed_programs(site, count):
    from ngosite.models import Program

    for i in range(count):
        start = fake.date_between(start_date="-3y", end_date="-1m")
        db.session.add(
            Program(
                site=site,
                slug=_slug(),
                title=fake.bs().title(),
                description=fake.sentence(nb_words=18),
                content="\n\n".join(fake.paragraphs(nb=4)),
                category=PROGRAM_CATEGORIES[i % len(PROGRAM_CATEGORIES)],
                is_featured=i < 3,
                order_index=i,
                start_date=start,
                is_ongoing=fake.boolean(70),
                status="published",
            )
        )


def _seed_events(site, count):
    from ngosite.models import Event

    now = utcnow().replace(minute=0, second=0, microsecond=0)
    for i in range(count):
        offset = timedelta(days=fake.random_int(3, 90))
        start = now + offset if i % 2 == 0 else now - offset
        db.session.add(
            Event(
                site=site,
                slug=_slug(),
                title=f"{fake.city()} {fake.random_element(['Health Camp', 'Workshop', 'Drive', 'Meetup'])}",
                short_description=fake.sentence(nb_words=12),
                long_description="\n\n".join(fake.paragraphs(nb=2)),
                start_date=start,
                end_date=start + timedelta(hours=3),
                location=fake.address().replace("\n", ", "),
                registration_url=fake.url() if i % 2 == 0 else None,
                is_active=True,
            )
        )


def _seed_posts(site, count):
    from ngosite.models import BlogPost

    for i in range(count):
        db.session.add(
            BlogPost(
                site=site,
                slug=_slug(),
                title=fake.sentence(nb_words=7).rstrip("."),
                excerpt=fake.sentence(nb_words=20),
                content="\n\n".join(fake.paragraphs(nb=5)),
                category=POST_CATEGORIES[i % len(POST_CATEGORIES)],
                tags=fake.words(nb=3),
                author_name=fake.name(),
                published_at=utcnow() - timedelta(days=fake.random_int(1, 365)),
                status="published",
            )
        )


def _seed_showcase(site):
    from ngosite.models import (AboutSection, CaseStudy, GalleryImage,
                                ImpactStat, Partner, Report, TeamMember,
                                Testimonial, TimelineItem)

    if not AboutSection.query.filter_by(site=site).first():
        db.session.add(
            AboutSection(
                site=site,
                mission=fake.paragraph(nb_sentences=3),
                vision=fake.paragraph(nb_sentences=2),
                story="\n\n".join(fake.paragraphs(nb=3)),
            )
        )
    for i in range(4):
        db.session.add(TeamMember(site=site, name=fake.name(), role=fake.job(), bio=fake.paragraph(), order_index=i))
        db.session.add(
            Partner(
                site=site,
                name=fake.company(),
                description=fake.catch_phrase(),
                website_url=fake.url(),
                category=PARTNER_CATEGORIES[i % len(PARTNER_CATEGORIES)],
                order_index=i,
            )
        )
        db.session.add(
            Testimonial(site=site, quote=fake.paragraph(nb_sentences=2), author_name=fake.name(), author_role="Volunteer", order_index=i)
        )
        db.session.add(
            GalleryImage(
                site=site,
                title=fake.sentence(nb_words=4).rstrip("."),
                image_path=f"gallery/demo-{i + 1}.jpg",
                category=GALLERY_CATEGORIES[i % len(GALLERY_CATEGORIES)],
                order_index=i,
            )
        )
    this_year = date.today().year
    stats = [("Children educated", "12K+", None), ("Health camps", "340", None), ("Villages reached", "85", this_year - 1)]
    for i, (label, value, year) in enumerate(stats):
        db.session.add(ImpactStat(site=site, label=label, value=value, year=year, order_index=i))
    for i, year in enumerate(range(this_year - 6, this_year, 2)):
        db.session.add(TimelineItem(site=site, year=str(year), title=fake.sentence(nb_words=5).rstrip("."), order_index=i))
    db.session.add(
        CaseStudy(site=site, slug=_slug(), title=fake.sentence(nb_words=6).rstrip("."), description=fake.paragraph(), location=fake.city(), year=this_year - 1, status="published")
    )
    db.session.add(Report(site=site, title=f"Annual Report {this_year - 1}", year=this_year - 1, status="published"))


__all__ = ["demo_cli", "seed_site"]
