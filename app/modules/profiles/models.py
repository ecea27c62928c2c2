# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- role: text (family | professional | community | admin, default: family)
- full_name: text (nullable)
- avatar_url: text (nullable)
- phone: text (nullable)
- location: text (nullable)
- professional_type: text (nullable) - professional users only
- care_services: text[] (nullable) - professional users only
- care_recipient_name: text (nullable) - family users only
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
from enum import Enum

PROFILES_TABLE = "profiles"


class UserRole(str, Enum):
    FAMILY = "family"
    PROFESSIONAL = "professional"
    COMMUNITY = "community"
    ADMIN = "admin"
