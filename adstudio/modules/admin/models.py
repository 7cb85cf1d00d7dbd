# Supabase table: profiles (see modules/auth/models.py)
# Role changes are mirrored into auth.users app_metadata.role, which takes
# precedence over profiles.role when a request's role is resolved.
