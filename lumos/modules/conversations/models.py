# Supabase tables: sessions, messages, session_analytics
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sessions:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (references auth.users.id)
- title: text (nullable) - e.g. "Lumos • Voice Session"
- meta: jsonb (nullable) - e.g. {"channel": "voice", "ws_id": "...", "user_agent": "..."}
- started_at: timestamp (default: now())
- ended_at: timestamp (nullable)

messages:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- session_id: uuid (nullable, references sessions.id on delete cascade)
- role: text (user | assistant | system)
- content: text
- ts: timestamp (default: now())
- idx: int - per-user running counter, next = last + 1

session_analytics:
- id: uuid (primary key)
- session_id: uuid (references sessions.id on delete cascade)
- user_id: uuid (references auth.users.id)
- emotion: text (stressed | sad | happy | angry | neutral)
- tokens_used: int
- duration_sec: float
- metrics: jsonb (nullable) - e.g. {"model": "...", "response_length": 120}
- created_at: timestamp (default: now())
"""
