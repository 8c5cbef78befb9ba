"""
app/services/bulk_import_service.py

Bulk creation of content from a delimited text file.

    IDLE -> PARSING -> VALIDATING -> WRITING(row i) ... -> DONE
    PARSING -> REJECTED   (no data line, or a mandatory column is missing)

Structural defects abort the whole file with StructuralImportError. Anything
wrong with a single row is recorded against its line number and the import
carries on; nothing row-level is ever raised, not even an unexpected
exception from the store driver. Rows are written one at a time, in file
order, through the profile's write hook (AggregateWriter.create for
aggregates, QuestionWriter.create for deep talk questions).
"""

from __future__ import annotations

import csv
import logging
from typing import Iterator

from app.config import BulkImportSettings, get_bulk_import_settings
from app.domain.bulk_import import (
    ImportFailure,
    ImportOutcome,
    ImportPlan,
    ImportRow,
    ImportState,
    RowOutcome,
)
from app.domain.errors import (
    ReferenceNotFoundError,
    StructuralImportError,
    ValidationError,
    WriteError,
    WritePhase,
)
from app.services.aggregate_writer import AggregateWriter
from app.services.import_profiles import ImportProfile
from db.repositories.content_store import ContentStore
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)


class BulkImporter:
    """
    Parses, validates, and writes import files for any ImportProfile.
    """

    def __init__(
        self,
        writer: AggregateWriter,
        *,
        store: ContentStore | None = None,
        settings: BulkImportSettings | None = None,
    ) -> None:
        self._writer = writer
        self._store = store or writer.store
        self._settings = settings or get_bulk_import_settings()

    def run(self, text: str, profile: ImportProfile) -> ImportOutcome:
        """
        Import a whole file and return its report.

        Raises StructuralImportError only; ``outcome.success`` tells whether
        at least one row made it in.
        """

        plan = self.plan(text, profile)
        created_ids: list[str] = []
        write_failures: list[ImportFailure] = []
        for row_outcome in self.iter_outcomes(plan, profile):
            if row_outcome.ok and row_outcome.parent_id is not None:
                created_ids.append(row_outcome.parent_id)
            elif row_outcome.failure is not None:
                write_failures.append(row_outcome.failure)

        failures = sorted([*plan.failures, *write_failures], key=lambda failure: failure.line_number)
        outcome = ImportOutcome(
            attempted=plan.total_rows,
            succeeded=len(created_ids),
            failures=failures,
            created_ids=created_ids,
        )
        self._transition(profile, ImportState.WRITING, ImportState.DONE)
        logger.info(
            "Bulk import finished profile=%s attempted=%s succeeded=%s failed=%s",
            profile.name,
            outcome.attempted,
            outcome.succeeded,
            len(outcome.failures),
        )
        return outcome

    def plan(self, text: str, profile: ImportProfile) -> ImportPlan:
        """
        Parse and validate ``text`` without writing anything.
        """

        self._transition(profile, ImportState.IDLE, ImportState.PARSING)
        lines = [
            (line_number, line)
            for line_number, line in enumerate(text.lstrip("\ufeff").splitlines(), start=1)
            if line.strip()
        ]
        if len(lines) < 2:
            self._transition(profile, ImportState.PARSING, ImportState.REJECTED)
            raise StructuralImportError("El archivo CSV está vacío o no tiene datos.")

        _, header_line = lines[0]
        columns = tuple(profile.canonical_column(header) for header in self._split(header_line))
        missing = [column for column in profile.mandatory_columns() if column not in columns]
        if missing:
            self._transition(profile, ImportState.PARSING, ImportState.REJECTED)
            logger.warning(
                "Bulk import rejected profile=%s missing_columns=%s",
                profile.name,
                ",".join(missing),
            )
            raise StructuralImportError(
                f"Faltan columnas requeridas en el CSV: {', '.join(missing)}",
                missing_columns=missing,
            )

        self._transition(profile, ImportState.PARSING, ImportState.VALIDATING)
        rows: list[ImportRow] = []
        failures: list[ImportFailure] = []
        for line_number, line in lines[1:]:
            values = self._split(line)
            row = ImportRow(
                line_number=line_number,
                values={
                    column: values[index] if index < len(values) else ""
                    for index, column in enumerate(columns)
                },
            )
            problem = profile.row_problem(row)
            if problem is not None:
                self._record_failure(profile, failures, ImportFailure(line_number=line_number, message=problem))
                continue
            rows.append(row)

        return ImportPlan(
            profile_name=profile.name,
            columns=columns,
            rows=tuple(rows),
            failures=tuple(failures),
            total_rows=len(lines) - 1,
        )

    def iter_outcomes(self, plan: ImportPlan, profile: ImportProfile) -> Iterator[RowOutcome]:
        """
        Write planned rows one by one, yielding after each attempt.

        A consumer may stop iterating at any point; rows already written stay.
        """

        self._transition(profile, ImportState.VALIDATING, ImportState.WRITING)
        total = len(plan.rows)
        for current, row in enumerate(plan.rows, start=1):
            try:
                parent_id = self._write_row(row, profile)
            except _RowWriteFailure as exc:
                message = exc.message
                if self._settings.log_row_failures:
                    logger.warning(
                        "Bulk import row failed profile=%s line=%s error=%s",
                        profile.name,
                        row.line_number,
                        message,
                    )
            except Exception as exc:
                message = f"Error al guardar - {exc}"
                logger.exception(
                    "Bulk import row raised unexpectedly profile=%s line=%s",
                    profile.name,
                    row.line_number,
                )
            else:
                logger.debug(
                    "Bulk import row written profile=%s line=%s id=%s progress=%s/%s",
                    profile.name,
                    row.line_number,
                    parent_id,
                    current,
                    total,
                )
                yield RowOutcome(line_number=row.line_number, current=current, total=total, parent_id=parent_id)
                continue
            failure = ImportFailure(line_number=row.line_number, message=message)
            yield RowOutcome(line_number=row.line_number, current=current, total=total, failure=failure)

    def _write_row(self, row: ImportRow, profile: ImportProfile) -> str:
        reference_id: str | None = None
        if profile.reference_column is not None:
            raw_reference = row.get(profile.reference_column).strip()
            try:
                reference_id = profile.resolve_reference(self._store, raw_reference)
            except ReferenceNotFoundError as exc:
                raise _RowWriteFailure(exc.message) from exc
            except StoreError as exc:
                raise _RowWriteFailure(f"Error al buscar la referencia - {exc}") from exc

        try:
            return profile.write(self._writer, row, reference_id)
        except ValidationError as exc:
            raise _RowWriteFailure(f"Datos inválidos - {'; '.join(exc.problems) or exc.message}") from exc
        except WriteError as exc:
            if exc.phase == WritePhase.INSERT_TRANSLATIONS:
                raise _RowWriteFailure(f"Error en traducciones - {exc.message}") from exc
            raise _RowWriteFailure(f"Error al guardar - {exc.message}") from exc

    def _split(self, line: str) -> list[str]:
        values = next(csv.reader([line], delimiter=self._settings.delimiter), [])
        return [value.strip() for value in values]

    def _record_failure(
        self,
        profile: ImportProfile,
        failures: list[ImportFailure],
        failure: ImportFailure,
    ) -> None:
        failures.append(failure)
        if self._settings.log_row_failures:
            logger.warning(
                "Bulk import row rejected profile=%s line=%s error=%s",
                profile.name,
                failure.line_number,
                failure.message,
            )

    @staticmethod
    def _transition(profile: ImportProfile, current: ImportState, target: ImportState) -> None:
        logger.debug("Bulk import profile=%s %s -> %s", profile.name, current.value, target.value)


class _RowWriteFailure(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
