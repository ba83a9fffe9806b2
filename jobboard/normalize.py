import math
import re
from datetime import datetime
from typing import Optional

JUST_NOW = "Just now"
NEGOTIABLE = "Negotiable"
COMPETITIVE = "Competitive Salary"
RUPEES_PER_LAKH = 100000

PLACEHOLDER_LOGO = "/placeholder-logo.svg"
COMPANY_LOGOS = {
    "google": "/google-logo.svg",
    "microsoft": "/microsoft-logo.svg",
    "apple": "/apple-logo.svg",
    "amazon": "/amazon-logo.png",
    "tesla": "/tesla-logo.png",
    "netflix": "/netflix-logo.svg",
    "meta": "/meta-logo.svg",
    "uber": "/uber-logo.svg",
    "airbnb": "/airbnb-logo.svg",
    "spotify": "/spotify-logo.svg",
    "adobe": "/adobe-logo.svg",
    "salesforce": "/salesforce-logo.svg",
    "linkedin": "/linkedin-logo.svg",
    "stripe": "/stripe-logo.svg",
    "slack": "/slack-logo.svg",
    "zoom": "/zoom-logo.svg",
    "swiggy": "/swiggy-logo-orange.jpg",
}

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def company_logo(company: str) -> str:
    return COMPANY_LOGOS.get(normalize_text(company or ""), PLACEHOLDER_LOGO)


def _fmt_number(value: float) -> str:
    # 7.0 -> "7", 7.5 -> "7.5"
    return f"{value:g}"


def format_salary(value: float) -> str:
    """Display string for a normalized salary value (LPA)."""
    if not value:
        return NEGOTIABLE
    return f"{round(value)} LPA"


def salary_from_annual(amount: Optional[float]) -> float:
    """Convert an annual amount in rupees to LPA."""
    if not amount:
        return 0.0
    return amount / RUPEES_PER_LAKH


def format_salary_range(salary_min: Optional[float], salary_max: Optional[float]) -> str:
    """Display string for a backend min/max pair given in rupees."""
    if salary_min and salary_max:
        return f"₹{_fmt_number(salary_min / RUPEES_PER_LAKH)}-{_fmt_number(salary_max / RUPEES_PER_LAKH)} LPA"
    if salary_min:
        return f"₹{_fmt_number(salary_min / RUPEES_PER_LAKH)}+ LPA"
    if salary_max:
        return f"Up to ₹{_fmt_number(salary_max / RUPEES_PER_LAKH)} LPA"
    return COMPETITIVE


def parse_salary_value(display: Optional[str]) -> float:
    """First number in a display string such as "22 LPA" or "₹18-25 LPA". 0 when none."""
    if not display:
        return 0.0
    match = _NUMBER_RE.search(display.replace(",", ""))
    return float(match.group()) if match else 0.0


def posted_time(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Relative label for a creation timestamp: "{h}h Ago" under a day, else "{d}d Ago"."""
    if created_at is None:
        return JUST_NOW
    if now is None:
        now = datetime.now(created_at.tzinfo)
    hours = math.floor((now - created_at).total_seconds() / 3600)
    hours = max(hours, 0)
    if hours < 24:
        return f"{hours}h Ago"
    return f"{hours // 24}d Ago"


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing "Z" is accepted). None when unparseable."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None
