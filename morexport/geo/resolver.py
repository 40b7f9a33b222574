"""
morexport/geo/resolver.py
Phone number → country classification.

All functions in this module are pure and do not perform network I/O. They
use the numbering-plan and country metadata embedded in the `phonenumbers`
library (derived from libphonenumber).

Parse failures are not errors: they classify as UNKNOWN and the caller still
emits the row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import phonenumbers
from phonenumbers import geocoder
from phonenumbers.phonenumberutil import NumberParseException, PhoneNumberType

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = 'UNKNOWN'
MOBILE_SUFFIX = '_MOBILE'

# National French numbering: 0X XX XX XX XX
NATIONAL_COUNTRY_CODE = '33'

# Prefixes are not full numbers: pad with zeros, keep '+' and 5 digits.
PREFIX_WIDTH = 6

# Destination labels whose prefix has no country metadata (shared +1 plan,
# overseas departments, MOR labels in French). First match wins.
FALLBACK_COUNTRIES = (
    (('australia', 'australie'),                  'Australia'),
    (('canada',),                                 'Canada'),
    (('italy',),                                  'Italy'),
    (('russia',),                                 'Russia'),
    (('united states', 'unites states'),          'United States'),
    (('guadeloupe',),                             'France'),
    (('morocco',),                                'Morocco'),
    (('reunion', 'réunion', 'r?union', 'france'), 'France'),
    (('uk', 'united kingdom'),                    'United Kingdom'),
)


@dataclass(frozen=True)
class Classification:
    """Geography of one number or prefix."""
    region_code:  str       # ISO 3166 alpha-2, '' when the plan is shared and ambiguous
    display_name: str       # country name, or UNKNOWN
    is_mobile:    bool
    formatted:    str       # international format of the parsed number

    @property
    def is_unknown(self) -> bool:
        return self is UNKNOWN or self.display_name == UNKNOWN_LABEL

    @property
    def line_type_label(self) -> str:
        """Region code with a _MOBILE suffix for mobile numbers."""
        label = self.region_code or UNKNOWN_LABEL
        return label + MOBILE_SUFFIX if self.is_mobile else label


UNKNOWN = Classification(
    region_code  = UNKNOWN_LABEL,
    display_name = UNKNOWN_LABEL,
    is_mobile    = False,
    formatted    = UNKNOWN_LABEL,
)


# ── NORMALIZATION ────────────────────────────────────────────

def remove_zero(number: str) -> str:
    """Rewrite a national number to international digits (no '+')."""
    if number.startswith('000'):
        return number[3:]
    if number.startswith('00'):
        return number[2:]
    if number.startswith('0'):
        return NATIONAL_COUNTRY_CODE + number[1:]
    return number


def normalize_number(raw: str) -> str:
    number = (raw or '').strip()
    if number.startswith('+'):
        return number
    return '+' + remove_zero(number)


def normalize_prefix(raw: str) -> str:
    return ('+' + (raw or '').strip() + '0' * PREFIX_WIDTH)[:PREFIX_WIDTH]


# ── CLASSIFICATION ───────────────────────────────────────────

def classify(raw: str, label: str = '') -> Classification:
    """Classify a full dialed number. `label` feeds the name fallback."""
    return _classify(normalize_number(raw), label)


def classify_prefix(prefix: str, label: str = '') -> Classification:
    """Classify a billing prefix (a few leading digits, not a full number)."""
    return _classify(normalize_prefix(prefix), label)


def fallback_country(label: str) -> str:
    """Country name guessed from a destination label, or ''."""
    text = (label or '').lower()
    for needles, country in FALLBACK_COUNTRIES:
        if any(n in text for n in needles):
            return country
    return ''


def _classify(normalized: str, label: str) -> Classification:
    try:
        parsed = phonenumbers.parse(normalized, None)
    except NumberParseException as e:
        logger.debug(f"Unparseable number {normalized!r}: {e}")
        return UNKNOWN

    # No region when the number is not valid for any country sharing the code.
    region = phonenumbers.region_code_for_number(parsed) or ''
    name   = geocoder.country_name_for_number(parsed, 'en') if region else ''
    name   = name or fallback_country(label)

    return Classification(
        region_code  = region,
        display_name = name or UNKNOWN_LABEL,
        is_mobile    = phonenumbers.number_type(parsed) == PhoneNumberType.MOBILE,
        formatted    = phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.INTERNATIONAL),
    )
