"""CSV import domain service."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from kakeibo.database.base import Database
from kakeibo.domain.category import CategoryService
from kakeibo.domain.csv_parser import ParsedCSV, ParsedRow, parse_csv
from kakeibo.domain.entities import Category, CategoryMapping, Table
from kakeibo.domain.errors import (
    ImportStateError,
    NotFoundError,
    ValidationError,
    import_step_mismatch,
    missing_category_mapping,
    record_not_found,
)
from kakeibo.domain.ledger import LedgerService
from kakeibo.domain.payment_method import PaymentMethodService
from kakeibo.domain.validators import require_text

logger = logging.getLogger(__name__)


def expense_signature(
    date: str, category_id: str, amount: int, description: str, memo: str
) -> str:
    """Key used to detect duplicate expenses.

    Payment method and rating are not part of the key: rows differing only
    in those are treated as duplicates.
    """
    return f"{date}|{category_id}|{amount}|{description}|{memo}"


@dataclass
class ImportResult:
    """Result of an import operation."""

    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


class CSVImportService:
    """Service for importing expenses from CSV files."""

    def __init__(self, db: Database):
        """Initialize CSV import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger_service = LedgerService(db)

    # Category mappings
    def get_category_mappings(self) -> list[CategoryMapping]:
        """All persisted label mappings."""
        return self.db.order_by(Table.CATEGORY_MAPPINGS, "csv_category")

    def get_mapping_for(self, csv_category: str) -> Optional[CategoryMapping]:
        """Persisted mapping for one label, if any."""
        matches = self.db.where_equals(Table.CATEGORY_MAPPINGS, "csv_category", csv_category)
        return matches[0] if matches else None

    def save_category_mapping(self, csv_category: str, category_id: str) -> CategoryMapping:
        """Create or overwrite the mapping for a label."""
        csv_category = require_text("csv_category", csv_category)
        category_id = require_text("category_id", category_id)
        with self.db.transaction():
            existing = self.get_mapping_for(csv_category)
            if existing is not None:
                return self.db.update(
                    Table.CATEGORY_MAPPINGS, existing.id, {"category_id": category_id}
                )
            return self.db.add(
                Table.CATEGORY_MAPPINGS,
                {"csv_category": csv_category, "category_id": category_id},
            )

    # Import
    def import_expenses(
        self,
        rows: list[ParsedRow],
        category_map: Mapping[str, str],
        default_payment_method_id: str,
        skip_duplicates: bool = True,
    ) -> ImportResult:
        """Insert parsed rows as expenses.

        Args:
            rows: Parsed CSV rows
            category_map: CSV label -> category ID
            default_payment_method_id: Payment method given to every row
            skip_duplicates: Skip rows whose signature matches an existing
                non-deleted expense or an earlier row of this import

        Returns:
            ImportResult with imported/skipped counts and per-row errors

        Raises:
            ValidationError: If no payment method is given (nothing is written)
        """
        default_payment_method_id = require_text("payment_method_id", default_payment_method_id)
        result = ImportResult()

        with self.db.transaction():
            seen: set[str] = set()
            if skip_duplicates:
                seen = {
                    expense_signature(e.date, e.category_id, e.amount, e.description, e.memo)
                    for e in self.db.where_equals(Table.EXPENSES, "deleted", False)
                }

            staged = []
            for row in rows:
                category_id = category_map.get(row.category)
                if not category_id:
                    result.errors.append(missing_category_mapping(row.category))
                    continue

                signature = expense_signature(
                    row.date, category_id, row.amount, row.description, row.memo
                )
                if skip_duplicates and signature in seen:
                    result.skipped += 1
                    continue

                staged.append(
                    {
                        "date": row.date,
                        "category_id": category_id,
                        "payment_method_id": default_payment_method_id,
                        "amount": row.amount,
                        "description": row.description,
                        "rating": row.rating,
                        "memo": row.memo,
                    }
                )
                seen.add(signature)

            result.imported = len(self.ledger_service.bulk_add_expenses(staged))

        logger.info(
            "CSV import finished: %d imported, %d skipped, %d errors",
            result.imported,
            result.skipped,
            len(result.errors),
        )
        return result


class ImportStep(str, Enum):
    """Steps of an interactive CSV import."""

    UPLOAD = "upload"
    MAPPING = "mapping"
    CONFIRM = "confirm"
    DONE = "done"


class ImportSession:
    """One CSV import, walked through upload -> mapping -> confirm -> done.

    Steps only move forward; ``reset()`` returns to upload from any step.
    Mappings chosen during the mapping step are persisted immediately and
    pre-fill later sessions.
    """

    def __init__(self, db: Database):
        self.db = db
        self.import_service = CSVImportService(db)
        self.category_service = CategoryService(db)
        self.payment_method_service = PaymentMethodService(db)
        self.reset()

    def reset(self) -> None:
        """Discard the current file and return to the upload step."""
        self.step = ImportStep.UPLOAD
        self.parsed: Optional[ParsedCSV] = None
        self.category_map: dict[str, str] = {}
        self.result: Optional[ImportResult] = None

    def _require_step(self, step: ImportStep) -> None:
        if self.step != step:
            raise ImportStateError(import_step_mismatch(step.value, self.step.value))

    def upload(self, content: str) -> ParsedCSV:
        """Parse file content and move to the mapping step.

        Labels with a persisted mapping to an existing category are mapped
        right away.

        Raises:
            ValidationError: If the file has no importable rows
        """
        self._require_step(ImportStep.UPLOAD)
        parsed = parse_csv(content)
        if not parsed.rows:
            raise ValidationError("No importable rows found in CSV")

        category_map = {}
        for label in parsed.categories:
            mapping = self.import_service.get_mapping_for(label)
            if mapping is not None and self.category_service.get_category(mapping.category_id):
                category_map[label] = mapping.category_id

        self.parsed = parsed
        self.category_map = category_map
        self.step = ImportStep.MAPPING
        return parsed

    @property
    def unmapped_categories(self) -> list[str]:
        """Labels still waiting for a category."""
        if self.parsed is None:
            return []
        return [label for label in self.parsed.categories if label not in self.category_map]

    @property
    def all_mapped(self) -> bool:
        return self.parsed is not None and not self.unmapped_categories

    def map_category(self, csv_category: str, category_id: str) -> None:
        """Map a label to an existing category and persist the mapping.

        Raises:
            ValidationError: If the label does not occur in the file
            NotFoundError: If the category doesn't exist
        """
        self._require_step(ImportStep.MAPPING)
        if csv_category not in self.parsed.categories:
            raise ValidationError(f"Category label '{csv_category}' does not occur in the file")
        if self.category_service.get_category(category_id) is None:
            raise NotFoundError(record_not_found(Table.CATEGORIES.value, category_id))

        self.import_service.save_category_mapping(csv_category, category_id)
        self.category_map[csv_category] = category_id

    def create_category(self, csv_category: str) -> Category:
        """Create a category named after the label and map the label to it."""
        self._require_step(ImportStep.MAPPING)
        if csv_category not in self.parsed.categories:
            raise ValidationError(f"Category label '{csv_category}' does not occur in the file")

        category = self.category_service.add_category(csv_category)
        self.map_category(csv_category, category.id)
        return category

    def proceed(self) -> None:
        """Move from mapping to confirm once every label is mapped.

        Raises:
            ValidationError: If some labels are unmapped
        """
        self._require_step(ImportStep.MAPPING)
        unmapped = self.unmapped_categories
        if unmapped:
            raise ValidationError(f"Unmapped categories: {', '.join(unmapped)}")
        self.step = ImportStep.CONFIRM

    def confirm(
        self,
        default_payment_method_id: Optional[str] = None,
        skip_duplicates: bool = True,
    ) -> ImportResult:
        """Import the rows and finish.

        Args:
            default_payment_method_id: Defaults to the preferred active method
            skip_duplicates: See ``CSVImportService.import_expenses``

        Raises:
            ValidationError: If no payment method is available
        """
        self._require_step(ImportStep.CONFIRM)
        if default_payment_method_id is None:
            method = self.payment_method_service.default_payment_method()
            if method is None:
                raise ValidationError("No active payment method available for import")
            default_payment_method_id = method.id

        self.result = self.import_service.import_expenses(
            self.parsed.rows,
            self.category_map,
            default_payment_method_id,
            skip_duplicates=skip_duplicates,
        )
        self.step = ImportStep.DONE
        return self.result
