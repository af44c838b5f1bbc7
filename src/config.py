"""Runtime configuration read from environment variables.

All settings have defaults suitable for local development:
- Providers: Groq first, OpenAI as fallback
- Store: SQLite file next to this package
"""

import os
from pathlib import Path

# Comma-separated model ids, tried in order (see src/llm/factory.py)
PROVIDER_CHAIN = [
    m.strip()
    for m in os.environ.get(
        "SEQUENCER_PROVIDERS",
        "groq/llama-3.3-70b-versatile,openai/gpt-4o",
    ).split(",")
    if m.strip()
]

# Seconds before a single provider call is abandoned
PROVIDER_TIMEOUT = float(os.environ.get("SEQUENCER_PROVIDER_TIMEOUT", "8"))

# Most recent turns sent as context; older ones are dropped
HISTORY_LIMIT = int(os.environ.get("SEQUENCER_HISTORY_LIMIT", "5"))

# "sql" or "memory"
STORE_BACKEND = os.environ.get("SEQUENCER_STORE", "sql").lower()

# postgres://... for Postgres, empty for SQLite
DATABASE_URL = os.environ.get("SEQUENCER_DATABASE_URL", "")

SQLITE_PATH = Path(
    os.environ.get(
        "SEQUENCER_SQLITE_PATH",
        str(Path(__file__).parent / "conversations.db"),
    )
)

LOG_LEVEL = os.environ.get("SEQUENCER_LOG_LEVEL", "INFO").upper()

FALLBACK_REPLY = (
    "I apologize, but I couldn't generate a response at this time. "
    "Please try again."
)
