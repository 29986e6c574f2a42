"""Calendar-month parsing for enrollment timestamps."""

from __future__ import annotations

from typing import Optional

import pandas as pd


def calendar_month(value: object) -> Optional[pd.Period]:
    """Month of an ISO 8601 timestamp as written, ignoring any UTC offset.

    ``2025-01-31T23:30:00-05:00`` belongs to January even though it is
    already February in UTC. Missing or unparsable values give ``None``.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    stamp = pd.to_datetime(value.strip(), errors="coerce", format="ISO8601")
    if pd.isna(stamp):
        return None
    return pd.Period(year=stamp.year, month=stamp.month, freq="M")
