"""
Comparison keys for duplicate detection.

Both helpers are pure and are only ever applied to comparison keys;
stored registrations keep whatever the registrant typed.
"""

import re

_WHITESPACE = re.compile(r"\s+")
HU_COUNTRY_PREFIX = "+36"
HU_TRUNK_PREFIX = "06"


def normalize_phone(raw: str) -> str:
    """Strip all whitespace, then rewrite a leading +36 to 06.

    >>> normalize_phone("+36 30 123 4567")
    '06301234567'
    """
    compact = _WHITESPACE.sub("", raw or "")
    if compact.startswith(HU_COUNTRY_PREFIX):
        compact = HU_TRUNK_PREFIX + compact[len(HU_COUNTRY_PREFIX):]
    return compact


def normalize_email(raw: str) -> str:
    return (raw or "").strip().lower()
