from __future__ import annotations

from datetime import date, timedelta

import pytest

from conftest import TODAY
from vm_manifest.errors import InvalidDateFormatError
from vm_manifest.services.expiry_policy import (
    GRACE_HOURS,
    apply_expiry_policy,
    current_date,
    one_year_from,
    parse_expiry,
)


def test_empty_expiry_defaults_to_one_year_from_today():
    outcome = apply_expiry_policy({"expires": ""}, TODAY)

    assert outcome.values["expires"] == "2027-10-17"
    assert outcome.values["power"] == "true"
    assert outcome.delta_hours < 0
    assert outcome.excluded is False


def test_missing_expiry_key_defaults_too():
    outcome = apply_expiry_policy({"hostname": "h1"}, TODAY)
    assert outcome.values["expires"] == "2027-10-17"


def test_future_expiry_keeps_power_on():
    outcome = apply_expiry_policy({"expires": "2026-10-18"}, TODAY)
    assert outcome.values["power"] == "true"
    assert outcome.delta_hours == -24


def test_expiry_today_powers_off_but_is_kept():
    outcome = apply_expiry_policy({"expires": TODAY.isoformat()}, TODAY)
    assert outcome.values["power"] == "false"
    assert outcome.delta_hours == 0
    assert outcome.excluded is False


def test_six_days_past_is_inside_grace_window():
    expires = (TODAY - timedelta(days=6)).isoformat()
    outcome = apply_expiry_policy({"expires": expires}, TODAY)
    assert outcome.values["power"] == "false"
    assert outcome.delta_hours == 144
    assert outcome.excluded is False


def test_seven_days_past_is_excluded():
    expires = (TODAY - timedelta(days=7)).isoformat()
    outcome = apply_expiry_policy({"expires": expires}, TODAY)
    assert outcome.delta_hours == GRACE_HOURS
    assert outcome.excluded is True


def test_long_expired_row():
    outcome = apply_expiry_policy({"expires": "2020-01-01"}, TODAY)
    assert outcome.values["power"] == "false"
    assert outcome.excluded is True


def test_day_month_year_fallback_is_normalized():
    outcome = apply_expiry_policy({"expires": "01/02/2027"}, TODAY)
    assert outcome.expiry == date(2027, 2, 1)
    assert outcome.values["expires"] == "2027-02-01"
    assert outcome.values["power"] == "true"


def test_day_month_year_in_the_past():
    outcome = apply_expiry_policy({"expires": "01/02/2020"}, TODAY)
    assert outcome.values["expires"] == "2020-02-01"
    assert outcome.excluded is True


@pytest.mark.parametrize("value", ["not-a-date", "2020-13-01", "2020-1-1", "31/31/2020", "20200101", 20200101])
def test_invalid_dates_raise(value):
    with pytest.raises(InvalidDateFormatError):
        apply_expiry_policy({"expires": value}, TODAY, file="m.csv", row=9)


def test_invalid_date_error_carries_location():
    with pytest.raises(InvalidDateFormatError) as e:
        parse_expiry("soon", file="m.csv", row=9)
    assert e.value.file == "m.csv"
    assert e.value.row == 9
    assert "YYYY-MM-DD" in str(e.value)


def test_input_mapping_is_not_mutated():
    row = {"expires": ""}
    apply_expiry_policy(row, TODAY)
    assert row == {"expires": ""}


def test_one_year_from_leap_day():
    assert one_year_from(date(2028, 2, 29)) == date(2029, 3, 1)
    assert one_year_from(date(2026, 10, 17)) == date(2027, 10, 17)


def test_current_date_unknown_zone():
    with pytest.raises(ValueError):
        current_date("Not/AZone")


def test_current_date_returns_date():
    assert isinstance(current_date("UTC"), date)
