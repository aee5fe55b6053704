import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent  # <project>
INSTANCE_DIR = BASE_DIR / "instance"

def _default_sqlite_uri():
    return f"sqlite:///{(INSTANCE_DIR / 'apgbuilders.db').as_posix()}"

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or _default_sqlite_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    RECENT_EXPENSES_LIMIT = int(os.getenv("RECENT_EXPENSES_LIMIT", "5"))
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")

class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "DEBUG"

def ensure_instance(app):
    # Flask instance path and the default SQLite location
    os.makedirs(app.instance_path, exist_ok=True)
    if app.config["SQLALCHEMY_DATABASE_URI"] == _default_sqlite_uri():
        INSTANCE_DIR.mkdir(parents=True, exist_ok=True)
