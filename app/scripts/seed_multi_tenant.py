"""
Seed a demo tenant: one company with an admin, an employee and a few tasks.
Running it twice is harmless; an existing demo company is left untouched.
"""
import sys
import asyncio
from pathlib import Path

# Make the project root importable when run as a file
sys.path.append(str(Path(__file__).parent.parent.parent))

from app.database.session import AsyncSessionLocal
from app.scripts.init_db import init_db
from app.services import company as company_service
from app.services import task_service
from app.services import user as user_service
from app.utils.logger import logger

DEMO_COMPANY_EMAIL = "contact@defaultcompany.com"
DEMO_PASSWORD = "password123"

SAMPLE_TASKS = [
    ("Prepare quarterly report", "Collect the figures for the quarterly review", "HIGH"),
    ("Update onboarding guide", "Refresh the screenshots and links", "MEDIUM"),
    ("Clean up shared drive", None, "LOW"),
]


async def seed() -> None:
    await init_db()

    async with AsyncSessionLocal() as db:
        if await company_service.get_company_by_email(db, DEMO_COMPANY_EMAIL):
            logger.info("Demo company already exists, nothing to seed")
            return

        company, admin = await company_service.register_company(
            db,
            name="Default Company",
            email=DEMO_COMPANY_EMAIL,
            admin_name="Admin User",
            admin_email="admin@defaultcompany.com",
            password=DEMO_PASSWORD,
        )
        employee = await user_service.create_user(
            db,
            name="John Employee",
            email="john@defaultcompany.com",
            password=DEMO_PASSWORD,
            company_id=company.id,
        )

        for title, description, priority in SAMPLE_TASKS:
            await task_service.create_task(
                db,
                title=title,
                description=description,
                priority=priority,
                assigner_id=admin.id,
                assignee_id=employee.id,
                company_id=company.id,
            )

        logger.info(
            f"✅ Seeded company {company.id} with admin {admin.email} and employee {employee.email} "
            f"(password: {DEMO_PASSWORD})"
        )


if __name__ == "__main__":
    asyncio.run(seed())
