"""Bulk transaction ingestion: validate a batch of draft rows, then write it once."""
import csv
import json
import logging
from datetime import date
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from dompet.config import settings
from dompet.errors import BatchRejectedError, StoreError
from dompet.models.ingestion import BatchValidation, DraftRow, IngestResult
from dompet.models.transaction import TransactionCreate, TransactionKind
from dompet.services.catalog import is_valid_category
from dompet.utils.amounts import parse_amount
from dompet.utils.dates import parse_date
from dompet.utils.privacy import obfuscate_description

logger = logging.getLogger(__name__)

EMPTY_BATCH_ERROR = "At least one row with an amount and description is required"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _normalize_row(
    row: DraftRow,
    subtitle: Optional[str],
    today: date,
) -> TransactionCreate:
    """Turn one draft row into a transaction payload, or raise ValueError with the reason."""
    amount = parse_amount(row.amount)
    if amount <= 0:
        raise ValueError("amount must be greater than 0")

    description = _clean(row.description)
    if not description:
        raise ValueError("description is required")

    tx_date = today if row.date is None else parse_date(row.date)

    try:
        kind = TransactionKind(row.kind.strip().lower())
    except ValueError:
        raise ValueError(f"unknown kind '{row.kind}'")

    category = row.category.strip()
    if not is_valid_category(category, kind):
        raise ValueError(f"unknown {kind.value} category '{category}'")

    return TransactionCreate(
        kind=kind,
        category=category,
        subtitle=_clean(row.subtitle) or _clean(subtitle),
        amount=amount,
        currency=settings.default_currency,
        description=description,
        date=tx_date,
    )


def validate_batch(
    rows: Iterable[Any],
    subtitle: Optional[str] = None,
    today: Optional[date] = None,
) -> BatchValidation:
    """
    Validate a bulk batch row by row.

    A row is accepted when its amount parses to a finite number above zero,
    its description is not blank, its date parses, and its category exists
    in the catalog for its kind. Everything else is counted as rejected.

    Args:
        rows: DraftRow models or plain mappings, in entry order
        subtitle: Batch-level subtitle used by rows that have none
        today: Date for rows without one (defaults to today)

    Returns:
        BatchValidation; ``error`` is set when no row was accepted
    """
    today = today or date.today()
    accepted: List[TransactionCreate] = []
    rejected = 0
    first_error = None

    for index, raw in enumerate(rows, start=1):
        try:
            row = raw if isinstance(raw, DraftRow) else DraftRow.model_validate(raw)
            accepted.append(_normalize_row(row, subtitle, today))
        except (ValidationError, ValueError) as e:
            rejected += 1
            reason = "malformed row" if isinstance(e, ValidationError) else str(e)
            if first_error is None:
                first_error = f"row {index}: {reason}"
            logger.debug("Rejected bulk row %d: %s", index, reason)

    return BatchValidation(
        accepted=accepted,
        rejected_count=rejected,
        first_error=first_error,
        error=None if accepted else EMPTY_BATCH_ERROR,
    )


def parse_upload(filename: str, text_content: str) -> List[Any]:
    """
    Parse an uploaded CSV or JSON file into draft rows.

    Expected CSV format:
    date,kind,category,amount,description,subtitle

    Expected JSON format:
    [{"date": "...", "kind": "...", "amount": ..., ...}, ...]

    ``type`` is accepted as an alias of ``kind``. Rows are not validated here;
    that is left to :func:`validate_batch`.
    """
    # Spreadsheet exports often start with a UTF-8 byte-order mark
    if text_content.startswith("\ufeff"):
        text_content = text_content[1:]

    if filename.endswith(".csv"):
        items = list(csv.DictReader(text_content.splitlines()))
    elif filename.endswith(".json"):
        items = json.loads(text_content)
        if not isinstance(items, list):
            raise ValueError("JSON upload must be a list of rows")
    else:
        raise ValueError("File must be CSV or JSON")

    drafts = []
    for item in items:
        if not isinstance(item, dict):
            # Keep the position so the validator rejects it as its own row
            drafts.append(item)
            continue
        fields = {k: v for k, v in item.items() if k in DraftRow.model_fields and v not in (None, "")}
        if "kind" not in fields and item.get("type"):
            fields["kind"] = item["type"]
        drafts.append(fields)
    return drafts


class BulkIngestionService:
    """Validates bulk batches and writes them to the transaction store in one call."""

    def __init__(self, store):
        self.store = store

    def ingest(
        self,
        owner: str,
        rows: Iterable[Any],
        subtitle: Optional[str] = None,
        today: Optional[date] = None,
    ) -> IngestResult:
        """
        Validate a batch and store the accepted rows.

        Args:
            owner: Workspace member the rows belong to
            rows: Draft rows
            subtitle: Batch-level subtitle
            today: Date for rows without one

        Returns:
            IngestResult whose accepted_count is what the store reports

        Raises:
            BatchRejectedError: No row passed validation
            StoreError: The store rejected the write
        """
        validation = validate_batch(rows, subtitle=subtitle, today=today)
        if not validation.ok:
            logger.warning(
                "Rejected bulk batch for %s: %d rows, first error: %s",
                owner, validation.rejected_count, validation.first_error,
            )
            raise BatchRejectedError(validation)

        result = self.store.bulk_create_transactions(owner, validation.accepted)
        if result.error:
            logger.warning(
                "Bulk write failed for %s (%d rows, first: %s): %s",
                owner, len(validation.accepted),
                obfuscate_description(validation.accepted[0].description), result.error,
            )
            raise StoreError(result.error)

        message = f"Successfully added {result.count} transactions"
        if validation.rejected_count:
            message += f", {validation.rejected_count} rows rejected"
        logger.info("Bulk import for %s: %s", owner, message)

        return IngestResult(
            owner=owner,
            accepted_count=result.count,
            rejected_count=validation.rejected_count,
            first_error=validation.first_error,
            message=message,
        )

