# This project was developed with assistance from AI tools.
"""Human-readable deal numbers like ``DEALFLOW-001``.

A deal's number is derived from its primary key after the insert is
flushed, so numbering is gap-free only as far as the id sequence is.
"""

import re

DEAL_PREFIX = "DEALFLOW"

_DEAL_NUMBER_RE = re.compile(rf"^{DEAL_PREFIX}-(\d+)$")


def format_deal_number(seq: int) -> str:
    """Zero-pad to three digits; larger numbers keep their full width."""
    return f"{DEAL_PREFIX}-{seq:03d}"


def parse_deal_number(deal_number: str) -> int | None:
    match = _DEAL_NUMBER_RE.match(deal_number or "")
    if not match:
        return None
    return int(match.group(1))


def is_valid_deal_number(deal_number: str) -> bool:
    return parse_deal_number(deal_number) is not None


def next_deal_number(current_max: int) -> str:
    return format_deal_number(current_max + 1)
