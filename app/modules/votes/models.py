# Supabase tables: features, feature_upvotes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

features:
- id: uuid (primary key)
- title: text (not null)
- description: text (not null)
- status: feature_status (planned | in_development | ready_for_demo | launched)
- created_at: timestamp (default: now())

feature_upvotes:
- id: uuid (primary key)
- feature_id: uuid (references features.id, not null)
- user_id: uuid (references profiles.id)
- upvoted_at: timestamp (default: now())
- unique (feature_id, user_id) - a second vote fails with SQLSTATE 23505
"""

FEATURES_TABLE = "features"
FEATURE_UPVOTES_TABLE = "feature_upvotes"
