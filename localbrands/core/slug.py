from __future__ import annotations

import re

REPO_NAME_MAX_LENGTH = 50

_DISALLOWED = re.compile(r"[^a-z0-9]")
_REPEATED_DASH = re.compile(r"-+")
_NON_DIGIT = re.compile(r"\D")


def repo_slug(business_name: str) -> str:
    """Derive the repository name used for a business.

    Lower-cases the name, maps every character outside ``[a-z0-9]`` to ``-``,
    collapses runs of ``-`` and truncates the result to 50 characters.
    Leading and trailing dashes are kept, so ``"Oase Coffee Lab!"`` becomes
    ``"oase-coffee-lab-"``.
    """

    slug = _DISALLOWED.sub("-", business_name.lower())
    slug = _REPEATED_DASH.sub("-", slug)
    return slug[:REPO_NAME_MAX_LENGTH]


def digits_only(value: str) -> str:
    return _NON_DIGIT.sub("", value or "")
