# Supabase tables: user_roles, student_profiles, volunteer_profiles, teacher_profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- user_id: uuid (primary key, references auth.users.id)
- role_id: text (student | volunteer | teacher)
- created_at: timestamp (default: now())

student_profiles:
- user_id: uuid (primary key, references auth.users.id)
- full_name: text (not null)
- phone: text (nullable)
- school: text (nullable)
- subjects: text[] (default: '{}')
- goals: text (nullable)
- age: int (nullable)
- mbti: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

volunteer_profiles:
- user_id: uuid (primary key, references auth.users.id)
- full_name: text (not null)
- phone: text (nullable)
- skills: text[] (default: '{}')
- availability: jsonb (nullable) - e.g. {"weekdays": ["mon", "wed"], "hours": "evening"}
- experience: text (nullable)
- age: int (nullable)
- mbti: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

teacher_profiles:
- user_id: uuid (primary key, references auth.users.id)
- full_name: text (not null)
- phone: text (nullable)
- school: text (nullable)
- subjects: text[] (default: '{}')
- age: int (nullable)
- mbti: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

A user holds exactly one role. Inserting a second user_roles row for the
same user fails with a unique violation (23505).
"""

PROFILE_TABLES = {
    "student": "student_profiles",
    "volunteer": "volunteer_profiles",
    "teacher": "teacher_profiles",
}
