"""Central configuration loader for the AI Productivity Companion."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent
SCHEMAS_DIR = PROJECT_ROOT / "config" / "schemas"
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Schema file paths
WORKSPACE_SCHEMA = SCHEMAS_DIR / "workspace.schema.json"
TASK_ESTIMATE_SCHEMA = SCHEMAS_DIR / "task_estimate.schema.json"
INSIGHTS_SCHEMA = SCHEMAS_DIR / "insights.schema.json"

# Workspace used when a request carries no X-User-Id header
DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "local")

# Guided task entry: upper bound for a single minutes value (one week)
MAX_TASK_MINUTES = int(os.getenv("MAX_TASK_MINUTES", "10080"))

# Chat sessions idle longer than this are dropped on the next session open
CHAT_SESSION_IDLE_SECONDS = float(os.getenv("CHAT_SESSION_IDLE_SECONDS", "3600"))

# Assistant context sizes
CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", "10"))
RECENT_TASKS_IN_CONTEXT = int(os.getenv("RECENT_TASKS_IN_CONTEXT", "5"))
ESTIMATE_HISTORY_LIMIT = int(os.getenv("ESTIMATE_HISTORY_LIMIT", "10"))

# LLM configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1000"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_ENABLED = os.getenv("LLM_ENABLED", "true").lower() in ("true", "1", "yes")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "2"))
