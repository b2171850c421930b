from __future__ import annotations

import datetime
import math

from gauntlet.model import DeadlineStatus, Phase

NOT_APPLICABLE = DeadlineStatus(label="N/A")
EXPIRED = DeadlineStatus(label="Expired", is_expired=True)

_DAY_SECONDS = 24 * 60 * 60


def compute_deadline(
    start: datetime.datetime | None,
    now: datetime.datetime,
    phase: Phase,
    *,
    window_days: int = 7,
    urgent_days: int = 3,
) -> DeadlineStatus:
    """Remaining-time status for a gauntlet started at `start`.

    Expiry looks at the exact remaining time, so a candidate sitting at the
    deadline to the second still has "0 days left". The label rounds up.
    """
    if phase is Phase.Complete or start is None:
        return NOT_APPLICABLE

    deadline = start + datetime.timedelta(days=window_days)
    remaining = (deadline - now).total_seconds() / _DAY_SECONDS
    if remaining < 0:
        return EXPIRED

    days = math.ceil(remaining)
    return DeadlineStatus(label=f"{days} days left", is_urgent=days <= urgent_days)
