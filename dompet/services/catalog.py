"""Category catalog.

Static registry of the income and expense categories the dashboard offers.
Lookups never raise: callers get ``None`` from :func:`lookup` or a generic
fallback entry from :func:`describe`.
"""
from typing import Dict, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict

from dompet.models.transaction import TransactionKind

FALLBACK_ICON = "💰"


class CategoryEntry(BaseModel):
    """One catalog category."""

    model_config = ConfigDict(frozen=True)

    code: str
    label: str
    icon: str
    kind: TransactionKind


def _entries(kind: TransactionKind, rows) -> Tuple[CategoryEntry, ...]:
    return tuple(CategoryEntry(code=code, label=label, icon=icon, kind=kind) for code, label, icon in rows)


INCOME_CATEGORIES = _entries(TransactionKind.INCOME, (
    ("salary", "Gaji", "💵"),
    ("freelance", "Freelance", "💻"),
    ("asprak", "Asprak", "🎓"),
    ("volunteer", "Volunteer", "🤝"),
    ("investment", "Investasi", "📈"),
    ("gift", "Hadiah", "🎁"),
    ("other_income", "Lainnya", "💰"),
))

EXPENSE_CATEGORIES = _entries(TransactionKind.EXPENSE, (
    ("food", "Jajan/Makanan", "🍔"),
    ("daily_needs", "Kebutuhan Harian", "🏪"),
    ("shopping", "Belanja Bulanan", "🛒"),
    ("transport", "Transportasi", "🚗"),
    ("clothing", "Beli Pakaian", "👕"),
    ("treatment", "Treatment/Skincare", "💆"),
    ("sedekah", "Sedekah", "🤲"),
    ("gift_giving", "Ngasih", "🎀"),
    ("vacation", "Liburan", "✈️"),
    ("entertainment", "Hiburan", "🎮"),
    ("bills", "Tagihan", "📄"),
    ("utilities", "Listrik & Air", "💡"),
    ("internet", "Kuota/Internet", "📶"),
    ("health", "Kesehatan/Pengobatan", "🏥"),
    ("vehicle", "Service Kendaraan", "🔧"),
    ("furniture", "Perabotan", "🪑"),
    ("education", "Pendidikan", "📚"),
    ("saving", "Saving/Nabung", "🐷"),
    ("ewallet", "E-Wallet/DANA", "📱"),
    ("date", "Kencan", "❤️"),
    ("other_expense", "Lain-lain", "💸"),
))

_BY_KIND: Dict[TransactionKind, Dict[str, CategoryEntry]] = {
    TransactionKind.INCOME: {c.code: c for c in INCOME_CATEGORIES},
    TransactionKind.EXPENSE: {c.code: c for c in EXPENSE_CATEGORIES},
}


def all_income_categories() -> Tuple[CategoryEntry, ...]:
    return INCOME_CATEGORIES


def all_expense_categories() -> Tuple[CategoryEntry, ...]:
    return EXPENSE_CATEGORIES


def lookup(
    code: Optional[str],
    kind: Optional[Union[TransactionKind, str]] = None,
) -> Optional[CategoryEntry]:
    """
    Find a category by code.

    Args:
        code: Category code
        kind: Restrict the search to the income or expense catalog

    Returns:
        The entry, or None when the code is unknown (for that kind)
    """
    if not code:
        return None
    if kind is not None:
        try:
            kind = TransactionKind(kind)
        except ValueError:
            return None
        return _BY_KIND[kind].get(code)
    return _BY_KIND[TransactionKind.INCOME].get(code) or _BY_KIND[TransactionKind.EXPENSE].get(code)


def describe(code: Optional[str]) -> Tuple[str, str]:
    """Return (label, icon) for a code, using the raw code and a generic icon when unknown."""
    entry = lookup(code)
    if entry is None:
        return (code or "other", FALLBACK_ICON)
    return (entry.label, entry.icon)


def is_valid_category(code: Optional[str], kind: Union[TransactionKind, str]) -> bool:
    return lookup(code, kind) is not None
