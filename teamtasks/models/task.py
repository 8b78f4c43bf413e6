#teamtasks/models/task.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum, Index, func
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin, UTCDateTime
from teamtasks.models.enums import TaskStatus, TaskPriority

class Task(AuditMixin, SoftDeleteMixin, Base):
    """
    Task inside a project. `completed_at` is set only while status is DONE.
    """
    __tablename__ = "tasks"
    __deleted_status__ = TaskStatus.DELETED

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(255), nullable=False, index=True, doc="Title, unique inside the project")
    description: str = Column(Text, nullable=True)
    status: TaskStatus = Column(Enum(TaskStatus, native_enum=False, length=20), nullable=False, default=TaskStatus.TO_DO, index=True)
    priority: TaskPriority = Column(Enum(TaskPriority, native_enum=False, length=20), nullable=False, default=TaskPriority.MEDIUM)
    project_id: int = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    assigned_to: int = Column(Integer, ForeignKey("users.id"), nullable=True, index=True, doc="Assignee")
    due_date: datetime = Column(UTCDateTime, nullable=True)
    completed_at: datetime = Column(UTCDateTime, nullable=True)

    project = relationship("Project")
    assignee = relationship("User", foreign_keys=[assigned_to])

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status={self.status})>"


Index("uq_tasks_project_title_lower", Task.project_id, func.lower(Task.title), unique=True)
