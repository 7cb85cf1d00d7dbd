# Supabase tables: user_template_access, template_variables, client_configs,
# client_template_assignments, template_fallback_variables
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and manager.py

"""
Expected Supabase table structure:

user_template_access
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- source_system: text (not null, 'heygen' | 'runway')
- external_id: text (not null) - template id in the source system
- template_name: text (not null)
- template_description: text (nullable)
- thumbnail_url: text (nullable)
- category: text (nullable)
- aspect_ratio: text (nullable)
- can_use: boolean (default: true)
- usage_count: integer (default: 0)
- last_used_at: timestamp (nullable)
- selected_at: timestamp (default: now())
- expires_at: timestamp (nullable)
- created_at / updated_at: timestamp
- unique (user_id, source_system, external_id)

template_variables
- id: uuid (primary key)
- template_access_id: uuid (foreign key to user_template_access.id, cascade delete)
- variable_name: text (not null)
- variable_type: text ('text' | 'image' | 'number')
- is_required: boolean (default: true)
- default_value: text (nullable)

client_configs
- id: uuid (primary key)
- client_id: text (unique, not null)
- client_name: text (not null)
- created_at / updated_at: timestamp

client_template_assignments
- id: uuid (primary key)
- client_config_id: uuid (foreign key to client_configs.id)
- template_id: text (not null)
- template_name: text (nullable)
- is_active: boolean (default: true)
- created_at: timestamp
- unique (client_config_id, template_id)

template_fallback_variables
- id: uuid (primary key)
- template_id: text (not null)
- variable_name: text (not null)
- variable_order: integer (not null, 1-based)
"""
