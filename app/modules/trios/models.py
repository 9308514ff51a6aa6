# Supabase tables: profiles (read), trios, trio_formation_batches
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
#
# Migration for the batch claim:
#   create table trio_formation_batches (
#     id uuid primary key default gen_random_uuid(),
#     date date not null unique,
#     created_at timestamptz not null default now()
#   );

"""
Expected Supabase table structure:

profiles (read only here):
- user_id: uuid (foreign key to auth.users.id, not null)
- birthday: date (not null)

trios:
- id: uuid (primary key)
- date: date (not null, default: current_date) - formation date
- user1_id: uuid (not null)
- user2_id: uuid (not null)
- user3_id: uuid (not null)
- user4_id: uuid (nullable) - set when the group absorbed a remainder
- user5_id: uuid (nullable)
- created_at: timestamp (default: now())

trio_formation_batches:
- id: uuid (primary key)
- date: date (not null, unique) - one formation batch per date
- created_at: timestamp (default: now())

RPCs:
- cleanup_expired_content() - deletes posts and replies past their 24h window
- create_group_notifications(p_trio_id uuid) - inserts a 'group_formed' notification per member
"""

TRIOS_TABLE = "trios"
PROFILES_TABLE = "profiles"
FORMATION_BATCHES_TABLE = "trio_formation_batches"

MEMBER_COLUMNS = ("user1_id", "user2_id", "user3_id", "user4_id", "user5_id")

GROUP_SIZE = 3
MAX_GROUP_SIZE = len(MEMBER_COLUMNS)
