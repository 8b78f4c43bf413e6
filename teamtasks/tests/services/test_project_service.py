import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from sqlalchemy.orm import Session

from teamtasks.core.exceptions import (
    AccessDeniedError,
    DuplicateProjectName,
    InvalidDateError,
    InvalidInputError,
    InvalidProjectStatusError,
    ProjectNotFound,
    TeamNotFound,
)
from teamtasks.models.enums import ProjectStatus, TeamRole
from teamtasks.schemas.project import ProjectCreate, ProjectUpdate
from teamtasks.schemas.team import TeamCreate
from teamtasks.services import project_service, team_member_service, team_service


def future(days: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def test_create_project_defaults_to_planned(db: Session, test_user, test_team):
    project = project_service.create_project(db, test_user, ProjectCreate(name="Roadmap", team_id=test_team.id))
    assert project.status == ProjectStatus.PLANNED
    assert project.created_by == test_user.id


def test_only_team_owner_creates_projects(db: Session, test_user, other_user, test_team):
    team_member_service.update_member_role(db, test_user, test_team.id, other_user.id, TeamRole.ADMIN)
    with pytest.raises(AccessDeniedError):
        project_service.create_project(db, other_user, ProjectCreate(name="Side", team_id=test_team.id))


def test_create_project_rejects_bad_initial_status_and_dates(db: Session, test_user, test_team):
    with pytest.raises(InvalidProjectStatusError):
        project_service.create_project(
            db, test_user, ProjectCreate(name="Done", team_id=test_team.id, status=ProjectStatus.COMPLETED)
        )
    with pytest.raises(InvalidDateError):
        project_service.create_project(
            db, test_user, ProjectCreate(name="Late", team_id=test_team.id, start_date=future(-2))
        )
    with pytest.raises(InvalidDateError):
        project_service.create_project(
            db, test_user,
            ProjectCreate(name="Backwards", team_id=test_team.id, start_date=future(10), end_date=future(5)),
        )


def test_project_name_unique_per_team(db: Session, test_user, test_team, test_project):
    with pytest.raises(DuplicateProjectName):
        project_service.create_project(db, test_user, ProjectCreate(name="BILLING", team_id=test_team.id))
    other_team = team_service.create_team(db, test_user, TeamCreate(name="Other"))
    assert project_service.create_project(db, test_user, ProjectCreate(name="Billing", team_id=other_team.id))


def test_get_project_visibility(db: Session, test_project, other_user, outsider, test_admin):
    assert project_service.get_project(db, other_user, test_project.id).id == test_project.id
    with pytest.raises(AccessDeniedError):
        project_service.get_project(db, outsider, test_project.id)
    project_service.delete_project(db, test_admin, test_project.id)
    with pytest.raises(ProjectNotFound):
        project_service.get_project(db, other_user, test_project.id)
    assert project_service.get_project(db, test_admin, test_project.id).status == ProjectStatus.DELETED


def test_project_of_deleted_team_is_hidden(db: Session, test_user, test_team, test_project):
    team_service.delete_team(db, test_user, test_team.id)
    with pytest.raises(TeamNotFound):
        project_service.get_project(db, test_user, test_project.id)


def test_listings(db: Session, test_user, other_user, test_team, test_project, test_admin):
    assert [p.id for p in project_service.list_projects_by_team(db, other_user, test_team.id)] == [test_project.id]
    assert [p.id for p in project_service.list_projects_by_owner(db, test_user, test_user.id)] == [test_project.id]
    with pytest.raises(AccessDeniedError):
        project_service.list_projects_by_owner(db, other_user, test_user.id)
    with pytest.raises(AccessDeniedError):
        project_service.list_all_projects(db, test_user)
    assert len(project_service.list_all_projects(db, test_admin)) == 1


def test_update_project(db: Session, test_user, other_user, test_project):
    with pytest.raises(AccessDeniedError):
        project_service.update_project(db, other_user, test_project.id, ProjectUpdate(description="x"))
    updated = project_service.update_project(
        db, test_user, test_project.id,
        ProjectUpdate(name="Billing v2", start_date=future(1), end_date=future(30)),
    )
    assert updated.name == "Billing v2"
    with pytest.raises(InvalidDateError):
        project_service.update_project(db, test_user, test_project.id, ProjectUpdate(end_date=future(0.5)))


def test_owner_status_changes_are_limited(db: Session, test_user, test_project):
    project_service.update_project_status(db, test_user, test_project.id, ProjectStatus.ON_HOLD)
    with pytest.raises(AccessDeniedError):
        project_service.activate_project(db, test_user, test_project.id)
    with pytest.raises(AccessDeniedError):
        project_service.delete_project(db, test_user, test_project.id)


def test_full_project_lifecycle(db: Session, test_user, test_admin, test_team):
    project = project_service.create_project(db, test_user, ProjectCreate(name="Lifecycle", team_id=test_team.id))
    project_service.activate_project(db, test_admin, project.id)
    with pytest.raises(InvalidProjectStatusError):
        project_service.archive_project(db, test_admin, project.id)
    project_service.update_project_status(db, test_user, project.id, ProjectStatus.COMPLETED)
    project_service.archive_project(db, test_admin, project.id)
    assert project.status == ProjectStatus.ARCHIVED
    project_service.restore_project(db, test_admin, project.id)
    assert project.status == ProjectStatus.PLANNED
    project_service.delete_project(db, test_admin, project.id)
    with pytest.raises(InvalidProjectStatusError):
        project_service.delete_project(db, test_admin, project.id)
    project_service.restore_project(db, test_admin, project.id)
    assert project.status == ProjectStatus.PLANNED


def test_activation_revalidates_dates(db: Session, test_user, test_admin, test_team):
    start = future(1)
    project = project_service.create_project(
        db, test_user, ProjectCreate(name="Dated", team_id=test_team.id, start_date=start)
    )
    with patch("teamtasks.core.clock.utcnow", return_value=start + timedelta(days=1)):
        with pytest.raises(InvalidDateError):
            project_service.activate_project(db, test_admin, project.id)


def test_transfer_project(db: Session, test_user, other_user, test_project, test_admin):
    target = team_service.create_team(db, test_user, TeamCreate(name="Target"))
    foreign = team_service.create_team(db, other_user, TeamCreate(name="Foreign"))
    with pytest.raises(InvalidInputError):
        project_service.transfer_project(db, test_user, test_project.id, test_project.team_id)
    with pytest.raises(AccessDeniedError):
        project_service.transfer_project(db, test_user, test_project.id, foreign.id)
    moved = project_service.transfer_project(db, test_user, test_project.id, target.id)
    assert moved.team_id == target.id
    assert project_service.transfer_project(db, test_admin, test_project.id, foreign.id).team_id == foreign.id
