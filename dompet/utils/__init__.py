from .amounts import parse_amount
from .dates import parse_date, shift_month, in_month, month_label, check_month
from .privacy import obfuscate_description, describe_record

__all__ = [
    "parse_amount",
    "parse_date",
    "shift_month",
    "in_month",
    "month_label",
    "check_month",
    "obfuscate_description",
    "describe_record",
]
