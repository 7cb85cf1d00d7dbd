# Supabase tables: asset_library, generated_assets
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

asset_library
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- title: text (not null)
- description: text (nullable)
- tags: text[] (default: '{}')
- asset_type: text (not null, 'image' | 'video' | 'content')
- asset_url: text (not null) - Cloudinary URL, or 'pending_<id>' while a render is running
- gif_url: text (nullable)
- content: text (nullable) - generated copy for 'content' assets
- instruction: text (not null) - prompt the asset was generated from
- source_system: text (not null, 'openai' | 'runway' | 'heygen')
- favorited: boolean (default: false)
- original_asset_id: uuid (nullable, foreign key to generated_assets.id)
- created_at / updated_at: timestamp

generated_assets
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- inventory_id: text (nullable) - product the asset was generated for
- channel: text (nullable)
- format: text (nullable)
- source_system: text (not null)
- asset_type: text (not null)
- url: text (not null) - 'pending_<video_id>' / 'pending_runway_<task_id>' until complete
- instruction: text (nullable)
- approved: boolean (default: false)
- created_at: timestamp
"""
