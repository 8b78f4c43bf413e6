#teamtasks/models/comment.py
from sqlalchemy import Column, Integer, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin
from teamtasks.models.enums import CommentStatus

class Comment(AuditMixin, SoftDeleteMixin, Base):
    __tablename__ = "comments"
    __deleted_status__ = CommentStatus.DELETED

    id: int = Column(Integer, primary_key=True)
    content: str = Column(Text, nullable=False)
    task_id: int = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Author")
    status: CommentStatus = Column(Enum(CommentStatus, native_enum=False, length=20), nullable=False, default=CommentStatus.ACTIVE, index=True)

    task = relationship("Task")

    def __repr__(self):
        return f"<Comment(id={self.id}, task_id={self.task_id}, user_id={self.user_id})>"
