"""
Tests for text, salary and time helpers.
"""

from datetime import datetime, timedelta

from jobboard.normalize import (
    JUST_NOW,
    PLACEHOLDER_LOGO,
    company_logo,
    format_salary,
    format_salary_range,
    parse_salary_value,
    parse_timestamp,
    posted_time,
    salary_from_annual,
)

NOW = datetime(2024, 6, 1, 12, 0)


class TestSalary:
    def test_format_salary(self):
        assert format_salary(22) == "22 LPA"
        assert format_salary(7.6) == "8 LPA"
        assert format_salary(0) == "Negotiable"

    def test_salary_from_annual(self):
        assert salary_from_annual(2500000) == 25.0
        assert salary_from_annual(None) == 0.0

    def test_format_salary_range(self):
        assert format_salary_range(1800000, 2500000) == "₹18-25 LPA"
        assert format_salary_range(1250000, None) == "₹12.5+ LPA"
        assert format_salary_range(None, None) == "Competitive Salary"

    def test_parse_salary_value(self):
        assert parse_salary_value("22 LPA") == 22.0
        assert parse_salary_value("₹18-25 LPA") == 18.0
        assert parse_salary_value("Competitive Salary") == 0.0
        assert parse_salary_value(None) == 0.0


class TestPostedTime:
    def test_buckets(self):
        assert posted_time(NOW, NOW) == "0h Ago"
        assert posted_time(NOW - timedelta(hours=23, minutes=59), NOW) == "23h Ago"
        assert posted_time(NOW - timedelta(hours=24), NOW) == "1d Ago"
        assert posted_time(NOW - timedelta(days=9, hours=5), NOW) == "9d Ago"

    def test_future_timestamp_clamped(self):
        assert posted_time(NOW + timedelta(hours=3), NOW) == "0h Ago"

    def test_missing_timestamp(self):
        assert posted_time(None, NOW) == JUST_NOW


class TestMisc:
    def test_parse_timestamp(self):
        assert parse_timestamp("2024-06-01T10:00:00") == datetime(2024, 6, 1, 10, 0)
        assert parse_timestamp("2024-06-01T10:00:00Z").tzinfo is not None
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(None) is None

    def test_company_logo(self):
        assert company_logo("Google") == "/google-logo.svg"
        assert company_logo("  SWIGGY ") == "/swiggy-logo-orange.jpg"
        assert company_logo("Unknown Startup") == PLACEHOLDER_LOGO
