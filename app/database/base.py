# Import base classes
from app.database.base_class import Base

# Import all models so they are registered on Base.metadata
from app.models.company import Company
from app.models.user import User
from app.models.task import Task
from app.models.comment import Comment
