#teamtasks/models/attachment.py
from sqlalchemy import Column, Integer, BigInteger, String, ForeignKey, Enum
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin
from teamtasks.models.enums import AttachmentStatus

class Attachment(AuditMixin, SoftDeleteMixin, Base):
    """
    File attached to a task. The bytes live in the blob store under `object_key`.
    """
    __tablename__ = "attachments"
    __deleted_status__ = AttachmentStatus.DELETED

    id: int = Column(Integer, primary_key=True)
    original_filename: str = Column(String(255), nullable=False, doc="Name sent by the client")
    stored_filename: str = Column(String(255), nullable=False, unique=True, doc="Generated name")
    bucket_name: str = Column(String(100), nullable=False)
    object_key: str = Column(String(500), nullable=False, unique=True, doc="Key in the blob store")
    file_size: int = Column(BigInteger, nullable=False)
    content_type: str = Column(String(100), nullable=False, default="application/octet-stream")
    task_id: int = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Uploader")
    status: AttachmentStatus = Column(Enum(AttachmentStatus, native_enum=False, length=20), nullable=False, default=AttachmentStatus.ACTIVE, index=True)

    task = relationship("Task")

    def __repr__(self):
        return f"<Attachment(id={self.id}, original_filename='{self.original_filename}', task_id={self.task_id})>"
