# Supabase table: client_storage (only when INTENT_STORAGE_BACKEND=supabase)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in storage.py

"""
Expected Supabase table structure:

client_storage:
- client_id: text (not null) - browser context identifier (X-Client-Id header)
- key: text (not null) - e.g. "pending_intent:vote", "session_id"
- value: text (not null) - JSON-encoded payload
- updated_at: timestamp (default: now())
- primary key (client_id, key)

Each client context owns an independent key space. Rows are overwritten
(upsert on client_id, key); a pending intent slot is one row per action kind.
"""

CLIENT_STORAGE_TABLE = "client_storage"
