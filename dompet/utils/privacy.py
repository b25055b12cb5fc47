"""Privacy utilities for obfuscating sensitive data in logs."""
import re
from typing import Any, Mapping, Optional


def obfuscate_description(description: Optional[str]) -> str:
    """
    Obfuscate free text before it is logged.
    Replaces alphanumeric characters with asterisks, preserves structure.
    """
    if not description:
        return "***"
    return re.sub(r'[A-Za-z0-9]', '*', description)


def describe_record(record: Any) -> dict:
    """
    Summarize a transaction-like record for a log line.
    Keeps the fields needed to find it again and hides the description.
    """
    if isinstance(record, Mapping):
        get = record.get
    else:
        get = lambda key: getattr(record, key, None)
    return {
        "id": get("id"),
        "owner": get("owner"),
        "kind": getattr(get("kind"), "value", get("kind")),
        "date": str(get("date")),
        "description": obfuscate_description(get("description")),
    }
