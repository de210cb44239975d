"""Local configuration for learnpath."""

from __future__ import annotations

import os

DEFAULT_SUPABASE_URL = "http://localhost:54321"
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_BACKOFF_S = 0.5
DEFAULT_USER_AGENT = "learnpath/0.1"
DEFAULT_CLONE_TITLE_SUFFIX = " (Copy)"
DEFAULT_MAX_DEPTH = 8
DEFAULT_LOG_LEVEL = "INFO"

# PostgREST endpoint of the backing store (Supabase project URL).
LEARNPATH_SUPABASE_URL = os.getenv("LEARNPATH_SUPABASE_URL", DEFAULT_SUPABASE_URL).rstrip("/")
LEARNPATH_SUPABASE_KEY = os.getenv("LEARNPATH_SUPABASE_KEY", "")
LEARNPATH_FETCH_TIMEOUT_S = float(os.getenv("LEARNPATH_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
LEARNPATH_FETCH_MAX_RETRIES = int(os.getenv("LEARNPATH_FETCH_MAX_RETRIES", str(DEFAULT_FETCH_MAX_RETRIES)))
LEARNPATH_FETCH_BACKOFF_S = float(os.getenv("LEARNPATH_FETCH_BACKOFF_S", str(DEFAULT_FETCH_BACKOFF_S)))
LEARNPATH_USER_AGENT = os.getenv("LEARNPATH_USER_AGENT", DEFAULT_USER_AGENT)
LEARNPATH_CLONE_TITLE_SUFFIX = os.getenv("LEARNPATH_CLONE_TITLE_SUFFIX", DEFAULT_CLONE_TITLE_SUFFIX)
LEARNPATH_LOG_LEVEL = os.getenv("LEARNPATH_LOG_LEVEL", DEFAULT_LOG_LEVEL)

# Documented nesting limit. The editor only warns past it; the cloner ignores it.
LEARNPATH_MAX_DEPTH = int(os.getenv("LEARNPATH_MAX_DEPTH", str(DEFAULT_MAX_DEPTH)))

TEMP_ID_PREFIX = "temp-"
UNSAVED_ID_PREFIXES = (TEMP_ID_PREFIX, "ai-item-")
