# Supabase table: system_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- key: text (unique, not null)
- value: text (not null)
- description: text (nullable)
- category: text (not null, default: 'general') - general | security | upload | email | system
- is_public: boolean (default: false) - readable by non-admin users when true
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
