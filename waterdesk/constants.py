from datetime import datetime
from zoneinfo import ZoneInfo

MANILA_TZ = ZoneInfo("Asia/Manila")

MONTHS_EN = {
    "01": "January",
    "02": "February",
    "03": "March",
    "04": "April",
    "05": "May",
    "06": "June",
    "07": "July",
    "08": "August",
    "09": "September",
    "10": "October",
    "11": "November",
    "12": "December",
}

ESCALATION_SENTINEL = "WOULD_YOU_LIKE_A_TICKET?"
CHATBOT_ISSUE_TYPE = "Chatbot Assistance Follow-up"

CUSTOMER_ISSUE_TYPES = [
    "Billing Discrepancy or Inquiry",
    "Water Leak (Before Meter)",
    "Water Leak (After Meter - Your Property)",
    "No Water Supply / Low Pressure",
    "Water Quality Issue (Color, Odor, Taste)",
    "Meter Problem (Damaged, Stuck, Inaccurate)",
    "Online Portal Issue / Account Access",
    "Request for Service (Disconnection/Reconnection)",
    CHATBOT_ISSUE_TYPE,
    "Other Concern",
]

QUICK_REPLIES = [
    "How to pay my bill?",
    "Report a water leak.",
    "My water pressure is low.",
    "What are current announcements?",
]


def format_period(ref: str) -> str:
    """'2025-10' -> 'October 2025'"""
    if not ref or "-" not in ref:
        return ref or ""
    year, month = ref.split("-")
    return f"{MONTHS_EN.get(month, month)} {year}"


def format_date(value: datetime | None) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%b %d, %Y")
