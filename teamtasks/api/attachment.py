#teamtasks/api/attachment.py
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List, Optional
from urllib.parse import quote

from teamtasks.core.settings import settings
from teamtasks.schemas.attachment import AttachmentRead
from teamtasks.services import attachment_service
from teamtasks.services.storage import BlobStorage
from teamtasks.dependencies import get_db, get_current_user, get_storage
from teamtasks.models.user import User as UserModel

router = APIRouter(prefix="/attachments", tags=["Attachments"])


@router.post("/", response_model=AttachmentRead, status_code=status.HTTP_201_CREATED)
def upload_attachment(
    task_id: int = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Upload a file and attach it to a task (multipart/form-data).
    """
    # At most one byte past the size limit
    data = file.file.read(settings.ATTACHMENT_MAX_FILE_SIZE + 1)
    return attachment_service.upload_attachment(
        db, storage, current_user, task_id, file.filename, data, file.content_type
    )


@router.get("/", response_model=List[AttachmentRead])
def list_all_attachments(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return attachment_service.list_all_attachments(db, current_user, skip, limit)


@router.get("/my", response_model=List[AttachmentRead])
def list_my_attachments(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return attachment_service.list_my_attachments(db, current_user, skip, limit)


@router.get("/{attachment_id}", response_model=AttachmentRead)
def get_attachment(attachment_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return attachment_service.get_attachment(db, current_user, attachment_id)


@router.get("/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
    current_user: UserModel = Depends(get_current_user),
):
    download = attachment_service.download_attachment(db, storage, current_user, attachment_id)
    filename = quote(download.attachment.original_filename)
    return Response(
        content=download.content,
        media_type=download.attachment.content_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )


@router.delete("/{attachment_id}", response_model=AttachmentRead)
def delete_attachment(attachment_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    """
    Soft delete; the stored file is kept.
    """
    return attachment_service.delete_attachment(db, current_user, attachment_id)
