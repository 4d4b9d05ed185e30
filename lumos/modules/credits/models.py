# Supabase tables: credit_wallets, credit_topups
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

credit_wallets:
- user_id: uuid (primary key, references auth.users.id)
- balance: int (default: 25, check balance >= 0)
- updated_at: timestamp

credit_topups:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id)
- txn_id: text (unique) - e.g. "TXN-8K2J4Q1Z"
- method: text (card | fpx | tng | grabpay)
- base_credits: int - credits paid for, 1 credit = RM1
- bonus_credits: int - tier + promo, free
- credits: int - base + bonus, added to the wallet
- amount_rm: numeric(10,2)
- promo_code: text (nullable)
- created_at: timestamp (default: now())
"""
