# teamtasks/services/attachment_service.py
"""
Task attachments. Metadata lives in the database, the bytes in the blob store.
Deleting an attachment is a status change only; the blob is kept.
"""
import logging
from typing import List, NamedTuple, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock, lifecycle
from teamtasks.core.authorization import Action, Resource
from teamtasks.core.exceptions import (
    AttachmentLimitReachedError,
    AttachmentNotFound,
    EmptyFileError,
    FileTooLargeError,
    InvalidInputError,
    StorageError,
)
from teamtasks.core.settings import settings
from teamtasks.crud import attachment as attachment_crud
from teamtasks.database import commit
from teamtasks.models.attachment import Attachment
from teamtasks.models.enums import AttachmentStatus
from teamtasks.models.user import User
from teamtasks.services.common import page_bounds
from teamtasks.services.storage import BlobStorage, generate_stored_filename, object_key_for
from teamtasks.services.task_service import load_live_task, load_visible_task, task_facts

logger = logging.getLogger("TaskHub.Attachments")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class AttachmentDownload(NamedTuple):
    attachment: Attachment
    content: bytes


def _load_attachment(db: Session, actor: User, attachment_id: int) -> Attachment:
    attachment = attachment_crud.get_attachment(db, attachment_id)
    if attachment is None:
        raise AttachmentNotFound()
    if attachment.is_deleted and not authz.is_system_admin(actor):
        raise AttachmentNotFound()
    load_visible_task(db, actor, attachment.task_id)
    return attachment


def _validate_file(filename: Optional[str], data: bytes) -> str:
    if not data:
        raise EmptyFileError()
    if filename is None or not filename.strip():
        raise InvalidInputError("File name must not be blank")
    if len(data) > settings.ATTACHMENT_MAX_FILE_SIZE:
        raise FileTooLargeError(
            f"File exceeds the maximum allowed size of {settings.ATTACHMENT_MAX_FILE_SIZE} bytes"
        )
    return filename.strip()


def upload_attachment(
    db: Session,
    storage: BlobStorage,
    actor: User,
    task_id: int,
    filename: Optional[str],
    data: bytes,
    content_type: Optional[str] = None,
) -> Attachment:
    authz.ensure_active(actor)
    original_filename = _validate_file(filename, data)
    task = load_live_task(db, actor, task_id)
    authz.authorize(actor, Resource.ATTACHMENT, Action.CREATE, task_facts(db, actor, task))
    if attachment_crud.count_live_attachments(db, task.id) >= settings.ATTACHMENT_MAX_FILES_PER_TASK:
        raise AttachmentLimitReachedError(
            f"A task can have at most {settings.ATTACHMENT_MAX_FILES_PER_TASK} attachments"
        )

    stored_filename = generate_stored_filename(original_filename)
    object_key = object_key_for(stored_filename)
    content_type = content_type or DEFAULT_CONTENT_TYPE
    storage.put(object_key, data, content_type)

    attachment = Attachment(
        original_filename=original_filename,
        stored_filename=stored_filename,
        bucket_name=storage.bucket_name,
        object_key=object_key,
        file_size=len(data),
        content_type=content_type,
        task_id=task.id,
        user_id=actor.id,
        status=AttachmentStatus.ACTIVE,
    )
    attachment.stamp_created(actor.id, clock.utcnow())
    db.add(attachment)
    try:
        commit(db)
    except Exception:
        try:
            storage.delete(object_key)
        except StorageError:
            logger.error(f"Orphaned blob {object_key} could not be removed")
        raise
    logger.info(
        f"User {actor.id} uploaded '{original_filename}' ({len(data)} bytes) to task {task.id} "
        f"(attachment ID: {attachment.id})"
    )
    return attachment


def get_attachment(db: Session, actor: User, attachment_id: int) -> Attachment:
    authz.ensure_active(actor)
    attachment = _load_attachment(db, actor, attachment_id)
    authz.authorize(
        actor, Resource.ATTACHMENT, Action.READ,
        task_facts(db, actor, attachment.task, owner_id=attachment.user_id),
    )
    return attachment


def list_attachments_by_task(db: Session, actor: User, task_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Attachment]:
    authz.ensure_active(actor)
    task = load_visible_task(db, actor, task_id)
    authz.authorize(actor, Resource.ATTACHMENT, Action.READ, task_facts(db, actor, task))
    skip, limit = page_bounds(skip, limit)
    return attachment_crud.list_attachments(
        db, task_id=task.id, include_deleted=authz.is_system_admin(actor), skip=skip, limit=limit
    )


def download_attachment(db: Session, storage: BlobStorage, actor: User, attachment_id: int) -> AttachmentDownload:
    authz.ensure_active(actor)
    attachment = _load_attachment(db, actor, attachment_id)
    lifecycle.ensure_not_deleted(attachment, "Attachment has been deleted")
    authz.authorize(
        actor, Resource.ATTACHMENT, Action.READ,
        task_facts(db, actor, attachment.task, owner_id=attachment.user_id),
    )
    content = storage.get(attachment.object_key)
    logger.info(f"User {actor.id} downloaded attachment {attachment.id}")
    return AttachmentDownload(attachment=attachment, content=content)


def delete_attachment(db: Session, actor: User, attachment_id: int) -> Attachment:
    authz.ensure_active(actor)
    attachment = attachment_crud.get_attachment(db, attachment_id)
    if attachment is None:
        raise AttachmentNotFound()
    lifecycle.ensure_not_deleted(attachment, "Attachment is already deleted")
    load_visible_task(db, actor, attachment.task_id)
    authz.authorize(
        actor, Resource.ATTACHMENT, Action.DELETE,
        task_facts(db, actor, attachment.task, owner_id=attachment.user_id),
    )
    lifecycle.validate_attachment_transition(attachment.status, AttachmentStatus.DELETED)
    attachment.status = AttachmentStatus.DELETED
    attachment.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} deleted attachment {attachment.id}")
    return attachment


def list_my_attachments(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Attachment]:
    authz.ensure_active(actor)
    skip, limit = page_bounds(skip, limit)
    return attachment_crud.list_attachments(db, user_id=actor.id, skip=skip, limit=limit)


def list_all_attachments(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Attachment]:
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.ATTACHMENT, Action.ADMINISTER)
    skip, limit = page_bounds(skip, limit)
    return attachment_crud.list_attachments(db, include_deleted=True, skip=skip, limit=limit)
