import os
import sys
from pathlib import Path

# Settings are read once at import time; pin a deterministic environment first.
os.environ["AI_PROVIDER"] = "gemini"
os.environ["GEMINI_API_KEY"] = "AIzaTestKey123"
os.environ["OPENAI_API_KEY"] = "sk-test-openai"
os.environ["GROQ_API_KEY"] = "gsk_test_groq"
os.environ["ANTHROPIC_API_KEY"] = "sk-ant-test"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ.pop("ANALYSIS_PROFILE", None)
os.environ.pop("SENTRY_DSN", None)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
