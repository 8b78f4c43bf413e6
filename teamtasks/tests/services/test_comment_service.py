import pytest
from sqlalchemy.orm import Session

from teamtasks.core.exceptions import (
    AccessDeniedError,
    AlreadyDeletedError,
    CommentNotFound,
    InvalidInputError,
    TaskNotFound,
)
from teamtasks.models.enums import CommentStatus, TeamRole
from teamtasks.schemas.comment import CommentCreate, CommentUpdate
from teamtasks.services import comment_service, task_service, team_member_service


@pytest.fixture
def comment(db: Session, other_user, test_task):
    return comment_service.create_comment(db, other_user, CommentCreate(task_id=test_task.id, content="First!"))


def test_create_comment(db: Session, comment, other_user, test_task):
    assert comment.user_id == other_user.id
    assert comment.task_id == test_task.id
    assert comment.status == CommentStatus.ACTIVE


def test_outsider_cannot_comment(db: Session, outsider, test_task):
    with pytest.raises(AccessDeniedError):
        comment_service.create_comment(db, outsider, CommentCreate(task_id=test_task.id, content="Hi"))


def test_no_comments_on_deleted_task(db: Session, test_user, test_task):
    task_service.delete_task(db, test_user, test_task.id)
    with pytest.raises(TaskNotFound):
        comment_service.create_comment(db, test_user, CommentCreate(task_id=test_task.id, content="Late"))


def test_only_author_edits(db: Session, comment, test_user, other_user):
    with pytest.raises(AccessDeniedError):
        comment_service.update_comment(db, test_user, comment.id, CommentUpdate(content="Owner edit"))
    edited = comment_service.update_comment(db, other_user, comment.id, CommentUpdate(content="  Edited  "))
    assert edited.content == "Edited"


def test_blank_content_is_rejected(db: Session, test_user, test_task):
    with pytest.raises(InvalidInputError):
        comment_service.create_comment(db, test_user, CommentCreate.model_construct(task_id=test_task.id, content="   "))


def test_team_manager_and_author_delete(db: Session, comment, test_user, test_task, outsider, test_team):
    team_member_service.add_member(db, test_user, test_team.id, outsider.id)
    with pytest.raises(AccessDeniedError):
        comment_service.delete_comment(db, outsider, comment.id)
    assert comment_service.delete_comment(db, test_user, comment.id).status == CommentStatus.DELETED
    with pytest.raises(AlreadyDeletedError):
        comment_service.delete_comment(db, test_user, comment.id)


def test_team_admin_deletes_comment(db: Session, test_user, other_user, outsider, test_team, test_task):
    team_member_service.add_member(db, test_user, test_team.id, outsider.id, TeamRole.ADMIN)
    note = comment_service.create_comment(db, other_user, CommentCreate(task_id=test_task.id, content="Note"))
    assert comment_service.delete_comment(db, outsider, note.id).status == CommentStatus.DELETED


def test_deleted_comment_hidden(db: Session, comment, other_user, test_admin, test_task):
    comment_service.delete_comment(db, other_user, comment.id)
    with pytest.raises(CommentNotFound):
        comment_service.get_comment(db, other_user, comment.id)
    with pytest.raises(AlreadyDeletedError):
        comment_service.update_comment(db, test_admin, comment.id, CommentUpdate(content="Revived"))
    assert comment_service.list_comments_by_task(db, other_user, test_task.id) == []
    assert len(comment_service.list_comments_by_task(db, test_admin, test_task.id)) == 1


def test_comment_listings(db: Session, comment, test_user, other_user, test_admin):
    assert [c.id for c in comment_service.list_my_comments(db, other_user)] == [comment.id]
    assert comment_service.list_my_comments(db, test_user) == []
    with pytest.raises(AccessDeniedError):
        comment_service.list_comments_by_user(db, test_user, other_user.id)
    assert len(comment_service.list_comments_by_user(db, test_admin, other_user.id)) == 1
    assert len(comment_service.list_all_comments(db, test_admin)) == 1
