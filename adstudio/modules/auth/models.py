# Supabase Auth + profiles, api_keys
# Identity lives in Supabase Auth (auth.users); the app keeps a profile row per user.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

Expected Supabase table structure (profiles):
- id: uuid (primary key, = auth.users.id)
- email: text (unique, not null)
- first_name: text (nullable)
- last_name: text (nullable)
- display_name: text (nullable)
- initials: text (nullable)
- role: text (not null, default 'user') - user | admin | superadmin
- status: text (default 'pending')
- email_verified: boolean (default false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

app_metadata.role on the auth user takes precedence over profiles.role.
"""

"""
api_keys
- id: uuid (primary key)
- provider: text (not null) - heygen | openai | runwayml | cloudinary ...
- key_value: text (not null) - never returned by the API
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
