from fastapi import APIRouter, File, Form, Response, UploadFile, status

from menu_admin.config import settings
from menu_admin.menu_imports.dependencies import MenuImportServiceDependency
from menu_admin.menu_imports.exceptions import BatchRejectedError
from menu_admin.menu_imports.parser import TEMPLATE_FILENAME, build_template_csv, parse_menu_csv
from menu_admin.menu_imports.schemas import MenuImportPreview, MenuImportPreviewRow, MenuImportReport

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if len(content) > settings.MENU_IMPORT_MAX_FILE_SIZE:
        raise BatchRejectedError(
            f"File too large. Max size: {settings.MENU_IMPORT_MAX_FILE_SIZE / (1024 * 1024):.0f}MB"
        )
    return content


@router.get("/template", status_code=status.HTTP_200_OK, summary="Download the bulk upload CSV template")
async def download_template():
    return Response(
        content=build_template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.post("/preview", response_model=MenuImportPreview, status_code=status.HTTP_200_OK, summary="Parse a menu CSV without importing it")
async def preview_menu_import(file: UploadFile = File(..., description="Menu CSV (see /template)")):
    """
    Parses the file and returns the rows as they would be imported.
    Nothing is written; rows without an image are counted for the auto-fill prompt.
    """
    rows = parse_menu_csv(await _read_upload(file))
    return MenuImportPreview(
        total_rows=len(rows),
        missing_images=sum(1 for row in rows if not row.has_image),
        rows=[
            MenuImportPreviewRow(
                line_number=row.line_number,
                restaurant_name=row.restaurant_name,
                item_name=row.item_name,
                price=row.price,
                category_name=row.category_name,
                has_image=row.has_image,
            )
            for row in rows
        ],
    )


@router.post("/", response_model=MenuImportReport, status_code=status.HTTP_200_OK, summary="Import menu items from a CSV")
async def import_menu(
    service: MenuImportServiceDependency,
    file: UploadFile = File(..., description="Menu CSV (see /template)"),
    auto_fill_images: bool = Form(False, description="Generate photos for rows without an Image URL"),
) -> MenuImportReport:
    """
    Imports every row of the file and returns a per-restaurant report.

    **Response:**
    - Success (200): Report with added, skipped (duplicates) and failed items per restaurant
    - Error (400): File cannot be parsed or misses mandatory columns; nothing was imported
    """
    # Structural errors propagate to the global exception handler before any write
    rows = parse_menu_csv(await _read_upload(file))
    return await service.import_rows(rows, auto_fill_images=auto_fill_images)
