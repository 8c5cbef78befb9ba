"""
app/api/routers/imports.py

Bulk content import HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from fastapi.responses import PlainTextResponse

from app.api.dependencies import get_bulk_importer, get_csv_upload, get_profile
from app.domain.errors import StructuralImportError
from app.schemas.imports import ImportFailureResponse, ImportOutcomeResponse
from app.services.bulk_import_service import BulkImporter
from app.services.import_profiles import ImportProfile

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/{profile}", response_model=ImportOutcomeResponse)
def upload_import(
    file: UploadFile = Depends(get_csv_upload),
    import_profile: ImportProfile = Depends(get_profile),
    importer: BulkImporter = Depends(get_bulk_importer),
) -> ImportOutcomeResponse:
    """
    Import one CSV file; row-level problems are reported, not raised.
    """

    try:
        text = file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV must be UTF-8 encoded.",
        ) from exc
    finally:
        file.file.close()

    try:
        outcome = importer.run(text, import_profile)
    except StructuralImportError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc

    return ImportOutcomeResponse(
        attempted=outcome.attempted,
        succeeded=outcome.succeeded,
        success=outcome.success,
        failures=[
            ImportFailureResponse(line_number=failure.line_number, message=failure.message)
            for failure in outcome.failures
        ],
        created_ids=outcome.created_ids,
    )


@router.get("/{profile}/example", response_class=PlainTextResponse)
def download_example(
    import_profile: ImportProfile = Depends(get_profile),
    reference_id: list[str] | None = Query(
        default=None,
        description="Existing reference values to use instead of the sample ones",
    ),
) -> PlainTextResponse:
    return PlainTextResponse(
        import_profile.example_file(reference_id),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="ejemplo_{import_profile.name}.csv"'},
    )
