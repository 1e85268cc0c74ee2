# Import all models here to ensure they are registered with SQLAlchemy
from app.models.company import Company
from app.models.user import User
from app.models.task import Task
from app.models.comment import Comment
