from __future__ import annotations

from ngosite.extensions import db
from ngosite.models.blog_post import BlogPost
from ngosite.models.campaign import Campaign
from ngosite.models.event import Event
from ngosite.models.leads import ContactSubmission, DonationPledge, VolunteerApplication
from ngosite.models.program import Program
from ngosite.models.showcase import (
    CaseStudy,
    GalleryImage,
    ImpactStat,
    Partner,
    Report,
    TeamMember,
    Testimonial,
    TimelineItem,
)
from ngosite.models.site import AboutSection, ContactInfo, HeroSection, Media, Website

__all__ = [
    "db",
    "AboutSection",
    "BlogPost",
    "Campaign",
    "CaseStudy",
    "ContactInfo",
    "ContactSubmission",
    "DonationPledge",
    "Event",
    "GalleryImage",
    "HeroSection",
    "ImpactStat",
    "Media",
    "Partner",
    "Program",
    "Report",
    "TeamMember",
    "Testimonial",
    "TimelineItem",
    "VolunteerApplication",
    "Website",
]
