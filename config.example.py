# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit the datastore key. Keep it in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "STREAKBOARD_APP_NAME": "App display name (default: streakboard).",
    "STREAKBOARD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Remote datastore (PostgREST / Supabase)
    "STREAKBOARD_BACKEND_URL": "Project URL, e.g. https://<project>.supabase.co (fallback: SUPABASE_URL).",
    "STREAKBOARD_BACKEND_KEY": "Anon API key sent as apikey + bearer token (fallback: SUPABASE_ANON_KEY).",
    "STREAKBOARD_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "STREAKBOARD_READ_TIMEOUT_SECONDS": "HTTP read timeout, never below the connect timeout (default: 15).",
    # Paths (gitignored)
    "STREAKBOARD_DATA_DIR": "Local data directory for logs and the snapshot (default: .local/streakboard).",
    "STREAKBOARD_SNAPSHOT_PATH": "Offline snapshot JSON path (default: <data_dir>/snapshot.json).",
    # Behaviour
    "STREAKBOARD_REMINDER_CHECK_SECONDS": "How often due reminders are checked (default: 60, minimum 1).",
    "STREAKBOARD_CONFIRM_DELETE": "Ask for --yes before deleting tasks/habits (true/false, default: true).",
}

# Without STREAKBOARD_BACKEND_URL/KEY the app runs against an in-process datastore;
# data then survives restarts only through the local snapshot.
