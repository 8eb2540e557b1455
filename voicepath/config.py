# voicepath/config.py
import os
from dotenv import load_dotenv


# Allowed values for the categorical task columns
IMPORTANCE_LEVELS = ("low", "medium", "high")
DURATION_LEVELS = ("short", "medium", "long")

load_dotenv()  # Load environment variables from .env file


class Config:
    # General environmental details
    APP_NAME = os.environ.get("APP_NAME", "VoicePath")
    SECRET_KEY = os.environ.get("SECRET_KEY", "change_me_in_env")
    # Database
    # Prefer env var, else default to absolute path under ./instance/voicepath.sqlite
    _BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    _DEFAULT_SQLITE_PATH = os.path.join(_BASE_DIR, "instance", "voicepath.sqlite")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URI",
        f"sqlite:///{_DEFAULT_SQLITE_PATH}?timeout=20&check_same_thread=False"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Browser client origins (comma separated, "*" for any)
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    # AWS Bedrock Configuration
    AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
    AWS_ACCESS_KEY_ID = os.environ.get("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY = os.environ.get("AWS_SECRET_ACCESS_KEY")
    AWS_SESSION_TOKEN = os.environ.get("AWS_SESSION_TOKEN")  # optional
    # Model for task extraction and the assistant (Default: Nova Lite)
    BEDROCK_MODEL_ID = os.environ.get("BEDROCK_MODEL_ID", "amazon.nova-lite-v1:0")
    # Cheaper model for flowchart breakdowns (Default: Nova Micro)
    BEDROCK_MODEL_ID_LITE = os.environ.get("BEDROCK_MODEL_ID_LITE", "amazon.nova-micro-v1:0")
    # LLM calls are never retried; these only bound a single attempt
    try:
        BEDROCK_CONNECT_TIMEOUT_SECONDS = max(1, int(os.environ.get("BEDROCK_CONNECT_TIMEOUT_SECONDS", "10")))
    except ValueError:
        BEDROCK_CONNECT_TIMEOUT_SECONDS = 10
    try:
        BEDROCK_READ_TIMEOUT_SECONDS = max(1, int(os.environ.get("BEDROCK_READ_TIMEOUT_SECONDS", "120")))
    except ValueError:
        BEDROCK_READ_TIMEOUT_SECONDS = 120

    # Generation parameters per LLM operation
    try:
        LLM_MAX_TOKENS = max(64, int(os.environ.get("LLM_MAX_TOKENS", "1024")))
    except ValueError:
        LLM_MAX_TOKENS = 1024
    try:
        EXTRACTION_TEMPERATURE = max(0.0, min(1.0, float(os.environ.get("EXTRACTION_TEMPERATURE", "0.3"))))
    except ValueError:
        EXTRACTION_TEMPERATURE = 0.3
    try:
        FLOWCHART_TEMPERATURE = max(0.0, min(1.0, float(os.environ.get("FLOWCHART_TEMPERATURE", "0.7"))))
    except ValueError:
        FLOWCHART_TEMPERATURE = 0.7
    try:
        ASSISTANT_TEMPERATURE = max(0.0, min(1.0, float(os.environ.get("ASSISTANT_TEMPERATURE", "0.7"))))
    except ValueError:
        ASSISTANT_TEMPERATURE = 0.7

    # Focus sessions
    try:
        FOCUS_CHECKIN_INTERVAL_MINUTES = max(1, int(os.environ.get("FOCUS_CHECKIN_INTERVAL_MINUTES", "1")))
    except ValueError:
        FOCUS_CHECKIN_INTERVAL_MINUTES = 1


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
