# Supabase tables: academic_projects, study_plans
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

academic_projects:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- title: text (not null)
- description: text (nullable)
- due_date: date (nullable)
- priority: text (low | medium | high, default: medium)
- status: text (not_started | in_progress | completed, default: not_started)
- subject: text (nullable)
- estimated_hours: numeric (nullable)
- actual_hours: numeric (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

study_plans:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- project_id: uuid (nullable, references academic_projects.id on delete cascade)
- planned_date: date (not null)
- start_time: time (nullable)
- duration_minutes: int (not null)
- task_description: text (not null)
- completed: boolean (default: false)
- actual_duration: int (nullable)
- productivity_score: int (nullable, 1-10)
- notes: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Resource analyses and generated plans are returned to the caller and never
stored; only projects and the study sessions the student accepts are.
"""
