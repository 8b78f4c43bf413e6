#teamtasks/crud/attachment.py
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.models.attachment import Attachment


def get_attachment(db: Session, attachment_id: int) -> Optional[Attachment]:
    return db.get(Attachment, attachment_id)


def count_live_attachments(db: Session, task_id: int) -> int:
    return db.query(Attachment).filter(
        Attachment.task_id == task_id,
        Attachment.not_deleted(),
    ).count()


def list_attachments(
    db: Session,
    task_id: Optional[int] = None,
    user_id: Optional[int] = None,
    include_deleted: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Attachment]:
    query = db.query(Attachment)
    if task_id is not None:
        query = query.filter(Attachment.task_id == task_id)
    if user_id is not None:
        query = query.filter(Attachment.user_id == user_id)
    if not include_deleted:
        query = query.filter(Attachment.not_deleted())
    return query.order_by(Attachment.created_at, Attachment.id).offset(skip).limit(limit).all()
