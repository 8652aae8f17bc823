"""Database persistence layer."""
from .database import get_session, init_db
from .models import Application, Base, Company, JobPosting
from .repositories import (
    ApplicationRepository,
    CompanyRepository,
    JobPostingRepository,
)

__all__ = [
    "Base",
    "Company",
    "JobPosting",
    "Application",
    "CompanyRepository",
    "JobPostingRepository",
    "ApplicationRepository",
    "init_db",
    "get_session",
]
