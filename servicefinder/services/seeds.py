"""Bundled reference data: common service names and offline providers."""

from __future__ import annotations

from servicefinder.domain.models import Provider

# Static reference list merged into every service catalog.
DEFAULT_SERVICES: tuple[str, ...] = (
    "plumbing",
    "electrical",
    "electrician",
    "cleaning",
    "house cleaning",
    "tutoring",
    "arabic tutoring",
    "quran tutoring",
    "math tutoring",
    "translation",
    "catering",
    "cooking",
    "event setup",
    "gardening",
    "landscaping",
    "handyman",
    "painting",
    "carpentry",
    "moving help",
    "babysitting",
    "elderly care",
    "beauty",
    "hair styling",
    "fitness",
    "personal training",
    "photography",
    "videography",
    "graphic design",
    "web design",
    "computer repair",
    "phone repair",
    "generator repair",
    "car repair",
    "driving lessons",
    "tailoring",
    "accounting",
    "tax preparation",
    "legal advice",
)

# Quick-search chips shown before the first search.
POPULAR_SERVICES: tuple[str, ...] = (
    "plumbing",
    "cleaning",
    "tutoring",
    "electrician",
    "gardening",
    "handyman",
    "beauty",
    "fitness",
    "catering",
    "photography",
)

FALLBACK_PROVIDER_RECORDS: tuple[dict, ...] = (
    {
        "id": "user1",
        "name": "Ahmed Hassan",
        "phone": "+1234567890",
        "email": "1234567890@mosque.app",
        "services": ["plumbing", "electrical", "generator repair"],
        "profileViews": 15,
        "contactsReceived": 8,
    },
    {
        "id": "user2",
        "name": "Fatima Al-Zahra",
        "phone": "+1234567891",
        "email": "1234567891@mosque.app",
        "services": ["tutoring", "translation", "arabic tutoring"],
        "profileViews": 22,
        "contactsReceived": 12,
    },
    {
        "id": "user3",
        "name": "Omar Abdullah",
        "phone": "+1234567892",
        "email": "1234567892@mosque.app",
        "services": ["catering", "event setup", "cooking"],
        "profileViews": 31,
        "contactsReceived": 18,
    },
)


def bundled_providers() -> tuple[Provider, ...]:
    return tuple(Provider.model_validate(record) for record in FALLBACK_PROVIDER_RECORDS)


__all__ = [
    "DEFAULT_SERVICES",
    "FALLBACK_PROVIDER_RECORDS",
    "POPULAR_SERVICES",
    "bundled_providers",
]
