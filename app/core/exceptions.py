class TaskFlowException(Exception):
    """Base exception for the application."""
    pass

class DatabaseException(TaskFlowException):
    """For database-related errors."""
    pass

class AIServiceException(TaskFlowException):
    """For failures talking to the language model server."""
    pass

class AuthenticationException(TaskFlowException):
    """For access tokens that cannot be trusted."""
    pass
