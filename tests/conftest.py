"""
Test environment. Settings are read at import time, so the variables are set
before anything from auto_api is imported.
"""
import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_auto.db")
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_ALGORITHM", "HS256")
os.environ.setdefault("MAIL_ENABLED", "false")
