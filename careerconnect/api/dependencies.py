"""
Service dependencies - build a service per request from the app's database.
"""

from fastapi import Depends
from passlib.context import CryptContext
from pymongo.database import Database

from careerconnect.core.auth import get_password_context
from careerconnect.db.mongodb import get_db
from careerconnect.services.mongo_service import JobService, MessageService, UserService


def get_user_service(
    db: Database = Depends(get_db),
    pwd_context: CryptContext = Depends(get_password_context),
) -> UserService:
    return UserService(db, pwd_context)


def get_job_service(db: Database = Depends(get_db)) -> JobService:
    return JobService(db)


def get_message_service(db: Database = Depends(get_db)) -> MessageService:
    return MessageService(db)
