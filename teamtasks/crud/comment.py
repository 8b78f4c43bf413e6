#teamtasks/crud/comment.py
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.models.comment import Comment


def get_comment(db: Session, comment_id: int) -> Optional[Comment]:
    return db.get(Comment, comment_id)


def list_comments(
    db: Session,
    task_id: Optional[int] = None,
    user_id: Optional[int] = None,
    include_deleted: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Comment]:
    query = db.query(Comment)
    if task_id is not None:
        query = query.filter(Comment.task_id == task_id)
    if user_id is not None:
        query = query.filter(Comment.user_id == user_id)
    if not include_deleted:
        query = query.filter(Comment.not_deleted())
    return query.order_by(Comment.created_at, Comment.id).offset(skip).limit(limit).all()
