from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from skillcheck.infrastructure.config import DATABASE_URL
from skillcheck.infrastructure.db.base import Base

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

__all__ = ["Base", "engine", "SessionLocal"]
