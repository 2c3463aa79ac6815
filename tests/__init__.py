"""Test configuration: an in-memory SQLite database and fixed JWT settings, set before app import."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_KEY"] = "test-signing-key-0123456789abcdef0123456789abcdef"
os.environ["JWT_ISSUER"] = "test-issuer"
os.environ["JWT_AUDIENCE"] = "test-audience"
os.environ["JWT_EXPIRE_MINUTES"] = "60"
os.environ["LOG_LEVEL"] = "WARNING"
