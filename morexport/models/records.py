"""
morexport/models/records.py
Typed rows decoded from MOR query results, one shape per report.
Data only, no logic. Decoding lives with each report.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class IncomingDurationRow:
    """Incoming seconds per DID, with its owner and device."""
    did:          str
    seconds:      int
    provider:     str
    username:     str
    extension:    Optional[str]
    description:  Optional[str]
    status:       str
    update_date:  str           # dids.closed_till


@dataclass(frozen=True)
class LineTypeDurationRow:
    """One answered outgoing call."""
    destination:  str           # raw dialed number
    duration:     int           # billsec, seconds


@dataclass(frozen=True)
class NumberActivityRow:
    """Incoming / outgoing activity of an active DID."""
    did:                str
    incoming_calls:     int
    incoming_duration:  int     # seconds
    last_incoming:      Optional[str]
    outgoing_calls:     int
    outgoing_duration:  int     # seconds
    last_outgoing:      Optional[str]
    provider:           str


@dataclass(frozen=True)
class DailyDestinationCallsRow:
    """Outgoing call count per day and MOR destination."""
    day:          str           # YYYY-MM-DD
    destination:  str           # destinations.name, free text label
    prefix:       str           # billing prefix digits
    calls:        int


@dataclass(frozen=True)
class DestinationPriceRow:
    """Provider cost per device group and MOR destination."""
    device_group: str
    destination:  str
    prefix:       str
    price:        str           # decimal comma, e.g. "12,50"
    duration:     int           # minutes
