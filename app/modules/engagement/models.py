# Supabase table: cta_engagement_tracking
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

cta_engagement_tracking:
- id: uuid (primary key)
- action_type: text (not null) - e.g. "feature_upvote", "subscription_cta_click"
- session_id: text (nullable) - correlation id shared by all events of one client context
- user_id: uuid (nullable) - null for anonymous visitors
- feature_name: text (default: '')
- additional_data: jsonb (nullable)
- created_at: timestamp (default: now())

Rows are append-only: the application never updates or deletes them.
"""

ENGAGEMENT_TABLE = "cta_engagement_tracking"
