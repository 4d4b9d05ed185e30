# Supabase table: user_preferences
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_preferences:
- user_id: uuid (primary key, references auth.users.id)
- preferences: jsonb (not null) - the onboarding/tutoring document, see schemas.TutorPreferences
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Keys missing from a stored document fall back to the defaults in
schemas.TutorPreferences, so older rows keep working when fields are added.
"""
