# Supabase tables: subjects, topics, videos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

subjects:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (unique)
- icon: text (nullable) - emoji or icon name
- color: text (nullable) - tailwind gradient or hex
- description: text (nullable)
- created_at: timestamp (default: now())

topics:
- id: uuid (primary key)
- subject_id: uuid (references subjects.id on delete cascade)
- name: text
- description: text (nullable)
- difficulty_level: text (beginner | intermediate | advanced)
- created_at: timestamp (default: now())
- unique (subject_id, name)

videos:
- id: uuid (primary key)
- topic_id: uuid (references topics.id on delete cascade)
- youtube_id: text
- title: text
- description: text (nullable)
- duration: int - seconds
- difficulty: text (beginner | intermediate | advanced)
- source: text (nullable) - channel or publisher
- created_at: timestamp (default: now())
- unique (topic_id, youtube_id)
"""
