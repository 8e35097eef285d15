import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./skillcheck.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")

# Proctoring: counters at or above this value flag the attempt
PROCTORING_VIOLATION_LIMIT = int(os.getenv("PROCTORING_VIOLATION_LIMIT", "10"))

# Default per-type question weights
MCQ_SCORE = int(os.getenv("MCQ_SCORE", "2"))
CODING_FULL_SCORE = int(os.getenv("CODING_FULL_SCORE", "12"))

_seed = os.getenv("RANDOM_SEED")
RANDOM_SEED = int(_seed) if _seed else None
