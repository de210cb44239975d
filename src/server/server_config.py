"""Configuration for the server."""

import os

APP_TITLE = "learnpath"
APP_VERSION = "0.1.0"

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = int(os.getenv("LEARNPATH_MAX_PAGE_SIZE", "50"))

# "postgrest" talks to the configured Supabase project; "memory" keeps data in-process.
BACKEND = os.getenv("LEARNPATH_BACKEND", "postgrest")

HOST = os.getenv("HOST", "0.0.0.0")  # noqa: S104
PORT = int(os.getenv("PORT", "8000"))
RELOAD = os.getenv("RELOAD", "false").lower() == "true"
