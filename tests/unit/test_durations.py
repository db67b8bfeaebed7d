"""Unit tests for duration policies and the validity form draft"""

import pytest
from datetime import date

from rto_validity.domain.durations import ValidityDraft, compute_end, compute_window
from rto_validity.domain.exceptions import InvariantViolation, NormalizationError, ValidationError
from rto_validity.domain.models import DurationPolicy, ValidityWindow
from rto_validity.utils.date_utils import days_between, shift_date


@pytest.mark.parametrize(
    "start,policy,expected",
    [
        (date(2025, 1, 24), DurationPolicy.FIVE_YEAR_PERMIT, date(2030, 1, 23)),
        (date(2025, 3, 1), DurationPolicy.ONE_YEAR_AUTHORIZATION, date(2026, 2, 28)),
        (date(2024, 3, 1), DurationPolicy.ONE_YEAR_AUTHORIZATION, date(2025, 2, 28)),
        (date(2025, 1, 31), DurationPolicy.LEARNING_LICENCE, date(2025, 7, 30)),
        (date(2025, 6, 1), DurationPolicy.THIRTY_DAY_WINDOW, date(2025, 6, 30)),
        (date(2025, 1, 1), DurationPolicy.ONE_YEAR_AUTHORIZATION, date(2025, 12, 31)),
    ],
)
def test_compute_end_is_day_before_anniversary(start, policy, expected):
    """Test the end date is the last valid day, one before the anniversary"""
    assert compute_end(start, policy) == expected


def test_compute_end_leap_day_rolls_forward():
    """Test 29 Feb rolls into 1 Mar of a non-leap year before the day is taken off"""
    assert compute_end(date(2024, 2, 29), DurationPolicy.ONE_YEAR_AUTHORIZATION) == date(2025, 2, 28)
    assert compute_end(date(2024, 2, 29), DurationPolicy.FIVE_YEAR_PERMIT) == date(2029, 2, 28)


def test_compute_end_month_overflow_for_learning_licence():
    """Test 31 Aug + 6 months overflows past the end of February"""
    # 31-08-2025 + 6 months -> 31-02-2026 -> 03-03-2026, minus one day
    assert compute_end(date(2025, 8, 31), DurationPolicy.LEARNING_LICENCE) == date(2026, 3, 2)


def test_compute_end_never_precedes_start():
    for policy in DurationPolicy:
        start = date(2025, 12, 31)
        assert compute_end(start, policy) >= start


def test_compute_window():
    window = compute_window(date(2025, 1, 24), DurationPolicy.FIVE_YEAR_PERMIT)
    assert window == ValidityWindow(date(2025, 1, 24), date(2030, 1, 23))
    assert window.contains(date(2030, 1, 23))
    assert not window.contains(date(2030, 1, 24))


def test_validity_window_rejects_inverted_range():
    with pytest.raises(InvariantViolation):
        ValidityWindow(date(2025, 2, 1), date(2025, 1, 31))


def test_shift_date_and_days_between():
    assert shift_date(date(2025, 11, 15), months=3) == date(2026, 2, 15)
    assert shift_date(date(2025, 1, 31), months=1) == date(2025, 3, 3)
    assert shift_date(date(2025, 6, 1), days=-1) == date(2025, 5, 31)
    assert days_between(date(2025, 6, 15), date(2025, 6, 10)) == -5


def test_draft_derives_end_from_typed_start():
    """Test typing the start fills in the end from the policy"""
    draft = ValidityDraft(DurationPolicy.FIVE_YEAR_PERMIT).with_start_input("240125")

    assert draft.start_input == "24-01-2025"
    assert draft.start_date == date(2025, 1, 24)
    assert draft.end_display == "23-01-2030"
    assert draft.to_window() == ValidityWindow(date(2025, 1, 24), date(2030, 1, 23))


def test_draft_manual_end_is_kept_until_start_changes():
    """Test a hand-typed end overrides the derived one, and a new start resets it"""
    draft = ValidityDraft(DurationPolicy.ONE_YEAR_AUTHORIZATION).with_start_input("01032025")
    draft = draft.with_end_input("15022026")

    assert draft.end_date == date(2026, 2, 15)

    draft = draft.with_start_input("01042025")
    assert draft.end_input == ""
    assert draft.end_date == date(2026, 3, 31)


def test_draft_incomplete_start_has_no_end():
    draft = ValidityDraft(DurationPolicy.ONE_YEAR_AUTHORIZATION).with_start_input("0103")

    assert draft.start_date is None
    assert draft.end_date is None
    assert draft.end_display == ""
    with pytest.raises(NormalizationError):
        draft.to_window()


def test_draft_end_before_start_is_rejected():
    draft = ValidityDraft(DurationPolicy.ONE_YEAR_AUTHORIZATION).with_start_input("01032025")
    draft = draft.with_end_input("01022025")

    with pytest.raises(ValidationError) as exc_info:
        draft.to_window()

    assert exc_info.value.field == "valid_to"
