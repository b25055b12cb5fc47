"""Amount parsing for user-entered values."""
import math
import re
from typing import Optional, Union

# "50.000" / "1.250.000" as typed into an id-ID currency field
_GROUPED = re.compile(r"^\d{1,3}(\.\d{3})+$")


def parse_amount(value: Optional[Union[int, float, str]]) -> float:
    """
    Parse an amount typed by a user.

    Accepts numbers, plain numeric strings ("50000", "12.5") and
    thousand-grouped strings ("50.000"). Surrounding whitespace and an
    "Rp" prefix are ignored.

    Raises:
        ValueError: If the value is missing, not numeric or not finite
    """
    if value is None or isinstance(value, bool):
        raise ValueError("Missing amount")

    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        s = str(value).strip()
        if s.lower().startswith("rp"):
            s = s[2:].strip()
        if not s:
            raise ValueError("Missing amount")
        if _GROUPED.match(s):
            s = s.replace(".", "")
        try:
            amount = float(s)
        except ValueError as e:
            raise ValueError(f"Amount is not a number: {value!r}") from e

    if not math.isfinite(amount):
        raise ValueError(f"Amount is not finite: {value!r}")
    return amount
