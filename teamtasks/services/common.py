# teamtasks/services/common.py
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from teamtasks.core.exceptions import InvalidInputError
from teamtasks.core.settings import settings
from teamtasks.crud import team as team_crud
from teamtasks.models.team import TeamMember


def page_bounds(skip: int = 0, limit: Optional[int] = None) -> Tuple[int, int]:
    """Clamps listing bounds to the configured page sizes."""
    if limit is None or limit <= 0:
        limit = settings.DEFAULT_PAGE_SIZE
    return max(skip, 0), min(limit, settings.MAX_PAGE_SIZE)


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field} must not be blank")
    return value.strip()


def membership_of(db: Session, team_id: int, user_id: int) -> Optional[TeamMember]:
    return team_crud.get_membership(db, team_id, user_id)
