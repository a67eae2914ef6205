import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# DEV ONLY default. Set SECRET_KEY in the environment for anything real.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")))

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/lms_gradebook.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Gradebook
GPA_SCALE = 4.0
SLOW_GRADEBOOK_MS = 2000  # warn when a matrix read takes longer than this
FEEDBACK_MAX_LENGTH = 5000
STUDENT_FILTER_MAX_LENGTH = 200
FULL_NAME_MAX_LENGTH = 255
