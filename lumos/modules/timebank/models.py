# Supabase tables: timebank_transactions, tutoring_sessions, help_requests,
# timebank_notifications, timebank_profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in the services

"""
Expected Supabase table structure:

timebank_transactions:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- type: text (earned | spent)
- amount: int - positive when earned, negative when spent
- activity: text - e.g. "Tutored Calculus"
- counterpart: text (nullable) - the other person, e.g. "Sarah M."
- rating: int (nullable, 1-5)
- description: text (nullable)
- created_at: timestamp (default: now())

help_requests:
- id: uuid (primary key)
- student_id: uuid (references auth.users.id)
- service: text - e.g. "math"
- subject: text - e.g. "Calculus"
- goal: text (solve | homework | testprep | check | deepen | explore | other)
- level: text (none | little | medium | well | perfect)
- mood: text (angry | sad | neutral | happy | confident)
- hold_credits: int
- minutes: int
- auto_extend: boolean
- status: text (matching | matched | completed | cancelled)
- volunteer_id: uuid (nullable)
- created_at: timestamp (default: now())
- matched_at: timestamp (nullable)

tutoring_sessions:
- id: uuid (primary key)
- volunteer_id: uuid (references auth.users.id)
- student_id: uuid (nullable)
- help_request_id: uuid (nullable, references help_requests.id)
- subject: text
- student_name: text
- status: text (active | completed | cancelled)
- started_at: timestamp
- ended_at: timestamp (nullable)
- duration_minutes: int (default: 0)
- rating: int (nullable, 1-5)
- feedback: text (nullable)
- credits_earned: int (nullable)

timebank_notifications:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- type: text (success | error | info | warning)
- title: text
- message: text
- read: boolean (default: false)
- created_at: timestamp (default: now())
- only the 10 most recent rows per user are kept

timebank_profiles:
- user_id: uuid (primary key)
- tutor_skills: text[] - subjects the user can tutor
- learning_goals: text[] - subjects the user wants help with
- updated_at: timestamp
"""
