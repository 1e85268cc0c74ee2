import os
from typing import List, Union, Optional
from pydantic_settings import BaseSettings
from pydantic import validator


class Settings(BaseSettings):
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "TaskFlow API"

    # CORS Configuration
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:5173", "http://localhost:3000"]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # JWT Configuration
    JWT_SECRET: str = "temporarysecret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # Database Configuration
    MYSQL_HOST: Optional[str] = None
    MYSQL_USER: Optional[str] = None
    MYSQL_PASSWORD: Optional[str] = None
    MYSQL_DATABASE: Optional[str] = None
    MYSQL_PORT: Optional[str] = None

    DATABASE_URI: Optional[str] = None

    @validator("DATABASE_URI", pre=True, always=True)
    def assemble_db_connection(cls, v: Optional[str], values: dict) -> Optional[str]:
        if v:
            return v

        database_url = os.getenv("DATABASE_URL") or os.getenv("MYSQL_URL")
        if database_url:
            return database_url

        db_params = ['MYSQL_USER', 'MYSQL_PASSWORD', 'MYSQL_HOST', 'MYSQL_PORT', 'MYSQL_DATABASE']
        if all(values.get(x) for x in db_params):
            connection_string = "mysql+pymysql://"
            connection_string += f"{values.get('MYSQL_USER')}:{values.get('MYSQL_PASSWORD')}"
            connection_string += f"@{values.get('MYSQL_HOST')}:{values.get('MYSQL_PORT')}/{values.get('MYSQL_DATABASE')}"
            return connection_string

        return None

    # Database Connection Pool (ignored for sqlite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Local language model (Ollama)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "gemma3"
    OLLAMA_TIMEOUT: Optional[float] = None  # None = no explicit timeout

    @property
    def ollama_chat_url(self) -> str:
        """Return the chat endpoint of the configured Ollama server"""
        return f"{self.OLLAMA_BASE_URL.rstrip('/')}/api/chat"

    # AI command assistant
    AI_RECENT_TASKS_LIMIT: int = 10  # Tasks shown to the model and used for "last task" references
    AI_LIST_TASKS_LIMIT: int = 20  # Max tasks returned by a list_tasks command

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "10/minute"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = None
        case_sensitive = True


settings = Settings()
