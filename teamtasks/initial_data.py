# teamtasks/initial_data.py

import asyncio
import logging
from sqlalchemy.orm import Session
from teamtasks.database import SessionLocal, engine
from teamtasks.crud.user import get_user_by_email
from teamtasks.core.settings import settings
from teamtasks.core.exceptions import AppError
from teamtasks.models.base import Base
from teamtasks.models.enums import UserRole
from teamtasks.schemas.user import UserCreate
from teamtasks.services.user_service import create_user
import teamtasks.models  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TaskHub.InitialData")

async def create_initial_admin_user(db: Session) -> None:
    logger.info("Checking if initial admin user needs to be created...")
    admin_email = settings.FIRST_ADMIN_EMAIL

    admin_user = get_user_by_email(db, admin_email)
    if admin_user:
        logger.info(f"Admin user '{admin_email}' already exists. No action taken.")
        return

    logger.info(f"Admin user '{admin_email}' not found. Creating...")
    data = UserCreate(
        email=admin_email,
        password=settings.FIRST_ADMIN_PASSWORD,
        first_name=settings.FIRST_ADMIN_FIRST_NAME,
        last_name=settings.FIRST_ADMIN_LAST_NAME,
        role=UserRole.ADMIN,
    )
    try:
        create_user(db, None, data)
        logger.info(f"Admin user '{admin_email}' created successfully.")
    except AppError as e:
        logger.error(f"Failed to create admin user: {e.message}")
        raise

async def main() -> None:
    logger.info("Initializing initial data (admin user)...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        await create_initial_admin_user(db)
    finally:
        db.close()
    logger.info("Finished initial data setup.")

if __name__ == "__main__":
    # Export .env to the process environment as well (boto3 reads AWS_* from there)
    from dotenv import load_dotenv
    load_dotenv()

    asyncio.run(main())
