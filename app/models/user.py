from sqlalchemy import Column, Integer, String, Enum, DateTime, func, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database.base_class import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password = Column(String(255), nullable=False)
    role = Column(Enum('ADMIN', 'EMPLOYEE', name='user_role'), default='EMPLOYEE', nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    __table_args__ = (
        UniqueConstraint('email', 'company_id', name='uix_user_email_company'),
    )

    company = relationship("Company", back_populates="users")
    assigned_tasks = relationship("Task", back_populates="assignee", foreign_keys="[Task.assignee_id]", passive_deletes=True)
    created_tasks = relationship("Task", back_populates="assigner", foreign_keys="[Task.assigner_id]", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"
