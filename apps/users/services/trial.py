"""Free-trial bookkeeping."""

import math
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone

SECONDS_PER_DAY = 24 * 60 * 60


def get_trial_status(*, user, now: Optional[datetime] = None) -> dict:
    """
    Describe where ``user`` stands in their free trial.

    Pro users are never expired. A user without a trial end date gets the
    full trial length. Otherwise the remaining days are rounded up, so a
    trial ending later today still counts as one day.

    Returns:
        Dict with is_pro, is_trial_expired, days_remaining, trial_end_date
    """
    now = now or timezone.now()
    trial_end = user.trial_end_date

    if user.is_pro:
        return {
            'is_pro': True,
            'is_trial_expired': False,
            'days_remaining': None,
            'trial_end_date': trial_end,
        }

    if trial_end is None:
        return {
            'is_pro': False,
            'is_trial_expired': False,
            'days_remaining': settings.TRIAL_LENGTH_DAYS,
            'trial_end_date': None,
        }

    seconds_left = (trial_end - now).total_seconds()
    return {
        'is_pro': False,
        'is_trial_expired': seconds_left <= 0,
        'days_remaining': max(0, math.ceil(seconds_left / SECONDS_PER_DAY)),
        'trial_end_date': trial_end,
    }
