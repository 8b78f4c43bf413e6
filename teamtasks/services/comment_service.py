# teamtasks/services/comment_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock, lifecycle
from teamtasks.core.authorization import Action, Resource
from teamtasks.core.exceptions import CommentNotFound
from teamtasks.crud import comment as comment_crud
from teamtasks.database import commit
from teamtasks.models.comment import Comment
from teamtasks.models.enums import CommentStatus
from teamtasks.models.user import User
from teamtasks.schemas.comment import CommentCreate, CommentUpdate
from teamtasks.services.common import page_bounds, require_text
from teamtasks.services.task_service import load_live_task, load_visible_task, task_facts

logger = logging.getLogger("TaskHub.Comments")


def _load_comment(db: Session, actor: User, comment_id: int) -> Comment:
    comment = comment_crud.get_comment(db, comment_id)
    if comment is None:
        raise CommentNotFound()
    if comment.is_deleted and not authz.is_system_admin(actor):
        raise CommentNotFound()
    load_visible_task(db, actor, comment.task_id)
    return comment


def create_comment(db: Session, actor: User, data: CommentCreate) -> Comment:
    authz.ensure_active(actor)
    task = load_live_task(db, actor, data.task_id)
    authz.authorize(actor, Resource.COMMENT, Action.CREATE, task_facts(db, actor, task))
    content = require_text(data.content, "Comment content")
    now = clock.utcnow()
    comment = Comment(
        content=content,
        task_id=task.id,
        user_id=actor.id,
        status=CommentStatus.ACTIVE,
    )
    comment.stamp_created(actor.id, now)
    db.add(comment)
    commit(db)
    logger.info(f"User {actor.id} commented on task {task.id} (comment ID: {comment.id})")
    return comment


def get_comment(db: Session, actor: User, comment_id: int) -> Comment:
    authz.ensure_active(actor)
    comment = _load_comment(db, actor, comment_id)
    authz.authorize(actor, Resource.COMMENT, Action.READ, task_facts(db, actor, comment.task, owner_id=comment.user_id))
    return comment


def list_comments_by_task(db: Session, actor: User, task_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Comment]:
    """Oldest first."""
    authz.ensure_active(actor)
    task = load_visible_task(db, actor, task_id)
    authz.authorize(actor, Resource.COMMENT, Action.READ, task_facts(db, actor, task))
    skip, limit = page_bounds(skip, limit)
    return comment_crud.list_comments(
        db, task_id=task.id, include_deleted=authz.is_system_admin(actor), skip=skip, limit=limit
    )


def list_my_comments(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Comment]:
    authz.ensure_active(actor)
    skip, limit = page_bounds(skip, limit)
    return comment_crud.list_comments(db, user_id=actor.id, skip=skip, limit=limit)


def list_comments_by_user(db: Session, actor: User, user_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Comment]:
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.COMMENT, Action.ADMINISTER)
    skip, limit = page_bounds(skip, limit)
    return comment_crud.list_comments(db, user_id=user_id, include_deleted=True, skip=skip, limit=limit)


def list_all_comments(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Comment]:
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.COMMENT, Action.ADMINISTER)
    skip, limit = page_bounds(skip, limit)
    return comment_crud.list_comments(db, include_deleted=True, skip=skip, limit=limit)


def update_comment(db: Session, actor: User, comment_id: int, data: CommentUpdate) -> Comment:
    """Only the author (or an administrator) edits the content."""
    authz.ensure_active(actor)
    comment = _load_comment(db, actor, comment_id)
    lifecycle.ensure_not_deleted(comment, "Cannot edit a deleted comment")
    authz.authorize(actor, Resource.COMMENT, Action.UPDATE, task_facts(db, actor, comment.task, owner_id=comment.user_id))
    comment.content = require_text(data.content, "Comment content")
    comment.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} edited comment {comment.id}")
    return comment


def delete_comment(db: Session, actor: User, comment_id: int) -> Comment:
    """ACTIVE -> DELETED; the author, a team OWNER/ADMIN or an administrator."""
    authz.ensure_active(actor)
    comment = comment_crud.get_comment(db, comment_id)
    if comment is None:
        raise CommentNotFound()
    lifecycle.ensure_not_deleted(comment, "Comment is already deleted")
    load_visible_task(db, actor, comment.task_id)
    authz.authorize(actor, Resource.COMMENT, Action.DELETE, task_facts(db, actor, comment.task, owner_id=comment.user_id))
    lifecycle.validate_comment_transition(comment.status, CommentStatus.DELETED)
    comment.status = CommentStatus.DELETED
    comment.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} deleted comment {comment.id}")
    return comment
