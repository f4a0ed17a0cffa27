from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from mobileshop.database import get_db
from mobileshop.users.permissions import require_superuser
from mobileshop.users.schemas import UserDisplaySchema
from . import service


router = APIRouter()


@router.get("/export/database")
def export_database(
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_superuser)
):
    """
    Download a consistent copy of the live SQLite database.
    """
    snapshot = service.create_snapshot(db.get_bind())

    return FileResponse(
        path=str(snapshot),
        filename=snapshot.name,
        media_type="application/octet-stream"
    )


@router.post("/import/database")
def import_database(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_superuser)
):
    engine = db.get_bind()
    db.close()
    return service.restore_database(engine, file.file)


@router.get("/export/data")
def export_data(
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_superuser)
):
    return service.collect_export_data(db)


@router.get("/export/excel")
def export_excel(
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_superuser)
):
    content = service.export_excel(db)

    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=mobile_shop_export.xlsx"},
    )


@router.get("/export/csv/{dataset}")
def export_csv(
    dataset: str,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_superuser)
):
    content = service.export_csv(db, dataset)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={dataset}.csv"},
    )
