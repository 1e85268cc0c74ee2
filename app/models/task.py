from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database.base_class import Base

class Task(Base):
    """A unit of work created by an assigner for an assignee, optionally under a parent task"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum('TODO', 'IN_PROGRESS', 'COMPLETED', name='task_status'), default='TODO', nullable=False)
    priority = Column(Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='task_priority'), default='MEDIUM', nullable=False)
    assigner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assignee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    # Microsecond timestamps so "most recently updated" ordering is stable
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_tasks_company_updated', 'company_id', 'updated_at'),
    )

    # Relationships
    company = relationship("Company", back_populates="tasks")
    assigner = relationship("User", back_populates="created_tasks", foreign_keys=[assigner_id])
    assignee = relationship("User", back_populates="assigned_tasks", foreign_keys=[assignee_id])
    parent_task = relationship("Task", remote_side=[id], back_populates="subtasks")
    subtasks = relationship("Task", back_populates="parent_task", passive_deletes=True)
    comments = relationship("Comment", back_populates="task", passive_deletes=True, order_by="[Comment.created_at.desc(), Comment.id.desc()]")

    def is_participant(self, user_id: int) -> bool:
        """True when the user is the assigner or the assignee of this task"""
        return user_id in (self.assigner_id, self.assignee_id)
