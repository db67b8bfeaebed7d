"""Driving licence and learning licence rules"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from rto_validity.config import settings
from rto_validity.domain.aggregation import filter_expiring_soon, filter_records
from rto_validity.domain.durations import compute_window
from rto_validity.domain.expiry import ExpiryRules, UrgencyBucket, build_expiry_rules
from rto_validity.domain.models import Context, DrivingLicence, DurationPolicy, ValidityWindow
from rto_validity.utils.date_utils import days_between

# Buckets listed on the licence expiry report
REPORT_BUCKETS = (
    UrgencyBucket.EXPIRED,
    UrgencyBucket.CRITICAL,
    UrgencyBucket.WARNING,
    UrgencyBucket.ATTENTION,
)


def learning_licence_window(issue_date: date) -> ValidityWindow:
    return compute_window(issue_date, DurationPolicy.LEARNING_LICENCE)


def is_eligible_for_driving_licence(
    ll_issue_date: Optional[date],
    ll_expiry_date: Optional[date],
    today: date,
    waiting_days: int | None = None,
) -> bool:
    """
    A learner may apply for the full licence once the learning licence has
    been held for the waiting period and has not expired.

    Exactly `waiting_days` after issue counts as eligible; the expiry day
    itself still counts as valid.
    """
    if ll_issue_date is None or ll_expiry_date is None:
        return False
    waiting_days = settings.learning_licence_waiting_days if waiting_days is None else waiting_days
    return ll_expiry_date >= today and days_between(ll_issue_date, today) >= waiting_days


def eligible_for_driving_licence(licences: Sequence[DrivingLicence], today: date) -> List[DrivingLicence]:
    eligible = []
    for licence in licences:
        window = licence.learning_licence
        if window is None:
            continue
        if is_eligible_for_driving_licence(window.start_date, window.end_date, today):
            eligible.append(licence)
    return eligible


def learning_licences_expiring_soon(
    licences: Sequence[DrivingLicence],
    today: date,
    rules: ExpiryRules | None = None,
) -> List[DrivingLicence]:
    return filter_expiring_soon(licences, Context.LEARNING_LICENCE, today, rules)


def licence_expiry_report(
    licences: Sequence[DrivingLicence],
    today: date,
    rules: ExpiryRules | None = None,
) -> Dict[UrgencyBucket, List[DrivingLicence]]:
    """Driving licences grouped as expired / within 30 / 60 / 90 days"""
    if rules is None:
        rules = build_expiry_rules()
    return {
        bucket: filter_records(licences, bucket, Context.DRIVING_LICENCE, today, rules)
        for bucket in REPORT_BUCKETS
    }
