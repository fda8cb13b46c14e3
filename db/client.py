"""Prisma client shared by the Prisma host backend (db/repo.py)."""
from prisma import Prisma
from dotenv import load_dotenv

from config import settings

load_dotenv()  # loads DATABASE_URL from .env for local dev

db = Prisma(log_queries=settings.prisma_log_queries)  # uses DATABASE_URL by default
