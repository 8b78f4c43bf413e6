#teamtasks/models/project.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum, Index, func
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin, UTCDateTime
from teamtasks.models.enums import ProjectStatus

class Project(AuditMixin, SoftDeleteMixin, Base):
    """
    Project owned by exactly one team. `created_by` is the creator.
    """
    __tablename__ = "projects"
    __deleted_status__ = ProjectStatus.DELETED

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(128), nullable=False, index=True, doc="Project name, unique inside the team")
    description: str = Column(Text, nullable=True)
    team_id: int = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    status: ProjectStatus = Column(Enum(ProjectStatus, native_enum=False, length=20), nullable=False, default=ProjectStatus.PLANNED, index=True)
    start_date: datetime = Column(UTCDateTime, nullable=True, doc="Planned start")
    end_date: datetime = Column(UTCDateTime, nullable=True, doc="Planned end")

    team = relationship("Team")

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}', team_id={self.team_id}, status={self.status})>"


Index("uq_projects_team_name_lower", Project.team_id, func.lower(Project.name), unique=True)
