import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./library.db")
SQL_ECHO: bool = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Lending policy
MAX_BORROWING: int = 2
LOAN_PERIOD_DAYS: int = int(os.getenv("LOAN_PERIOD_DAYS", "7"))
PENALTY_DAYS: int = int(os.getenv("PENALTY_DAYS", "3"))
