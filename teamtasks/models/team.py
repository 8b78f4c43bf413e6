#teamtasks/models/team.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum, Index, UniqueConstraint, func
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin, UTCDateTime
from teamtasks.models.enums import TeamStatus, TeamRole, MemberStatus

class Team(AuditMixin, SoftDeleteMixin, Base):
    """
    Team. The name is unique regardless of case. Exactly one OWNER membership
    exists for every active team.
    """
    __tablename__ = "teams"
    __deleted_status__ = TeamStatus.DELETED

    id: int = Column(Integer, primary_key=True)
    name: str = Column(String(128), nullable=False, index=True, doc="Team name")
    description: str = Column(Text, nullable=True, doc="Description")
    owner_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Creator and owner")
    status: TeamStatus = Column(Enum(TeamStatus, native_enum=False, length=20), nullable=False, default=TeamStatus.ACTIVE, index=True)

    members = relationship("TeamMember", back_populates="team", lazy="dynamic")

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.name}', status={self.status})>"


Index("uq_teams_name_lower", func.lower(Team.name), unique=True)


class TeamMember(AuditMixin, Base):
    """
    Membership of a user in a team. Rows are never deleted: removal and leaving
    only change the status.
    """
    __tablename__ = "team_members"

    id: int = Column(Integer, primary_key=True)
    team_id: int = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role: TeamRole = Column(Enum(TeamRole, native_enum=False, length=20), nullable=False, default=TeamRole.MEMBER)
    status: MemberStatus = Column(Enum(MemberStatus, native_enum=False, length=20), nullable=False, default=MemberStatus.ACTIVE, index=True)
    joined_at: datetime = Column(UTCDateTime, nullable=False, doc="When the user joined")

    team = relationship("Team", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    def __repr__(self):
        return f"<TeamMember(team_id={self.team_id}, user_id={self.user_id}, role={self.role}, status={self.status})>"
