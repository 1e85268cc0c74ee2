"""
Console logging for the API and the chat assistant
"""
import logging
from typing import Optional

from app.core.config import settings


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("taskflow")
ai_logger = logging.getLogger("taskflow.ai")
audit_logger = logging.getLogger("taskflow.audit")


def log_important(message: str) -> None:
    """Tenant lifecycle events (company registered, company deleted)"""
    audit_logger.info(f"AUDIT - {message}")


def log_command(requester_id: int, company_id: int, action: str, outcome: Optional[str]) -> None:
    """One line per chat command the assistant carried out"""
    ai_logger.info(
        f"🛠️ COMMAND {action} - user {requester_id}, company {company_id}: {outcome or 'no result'}"
    )
