"""Shared constants for dipindex."""

import re

# Review lifecycle statuses, in rough lifecycle order
STATUSES = [
    "Draft",
    "Community Review",
    "Final Review",
    "Formal Review",
    "Formal Assessment",
    "Accepted",
    "Accepted with modifications",
    "Rejected",
    "Postponed",
    "Withdrawn",
    "Superseded",
    "Final",
]

STATUS_ALIASES = {
    "formal assessment review": "Formal Assessment",
    "accepted with modification": "Accepted with modifications",
}

# Metadata table keys -> Proposal field names
FIELD_KEYS = {
    "dip": "id",
    "author": "author",
    "authors": "author",
    "review count": "review_count",
    "reviews": "review_count",
    "implementation": "implementation",
    "implementation link": "implementation",
    "status": "status",
}

REQUIRED_FIELDS = ("id", "status")

DIP_ID_PATTERN = re.compile(r'^(?:DIP\s*)?(\d+)$', re.IGNORECASE)

DEFAULT_GLOB = "DIP*.md"
