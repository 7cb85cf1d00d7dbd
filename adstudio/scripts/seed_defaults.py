"""
Seed Defaults Script
Populates system_settings from the defaults config and initializes the
default client's template assignments and fallback variables.
Can be run manually after provisioning a new database:

    python -m adstudio.scripts.seed_defaults
"""

import sys
import logging

from supabase import Client

from adstudio.config.default_settings import DEFAULT_SETTINGS
from adstudio.database.supabase_client import get_service_supabase
from adstudio.modules.templates.fallbacks import DEFAULT_CLIENT_ID
from adstudio.modules.templates.service import TemplateService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_settings(supabase: Client) -> int:
    """Insert default settings whose keys are not present yet. Returns the number created."""
    logger.info("Seeding system settings...")
    created_count = 0
    skipped_count = 0

    for setting in DEFAULT_SETTINGS:
        try:
            existing = supabase.table("system_settings")\
                .select("id")\
                .eq("key", setting["key"])\
                .execute()

            if existing.data:
                skipped_count += 1
                logger.debug(f"Setting already exists, skipping: {setting['key']}")
                continue

            supabase.table("system_settings").insert(setting).execute()
            created_count += 1
            logger.debug(f"Created setting: {setting['key']}")
        except Exception as e:
            logger.error(f"Error processing setting {setting['key']}: {e}")

    logger.info(f"Settings seeded: {created_count} created, {skipped_count} skipped")
    return created_count


def seed_templates(supabase: Client, client_id: str = DEFAULT_CLIENT_ID) -> dict:
    logger.info(f"Initializing default templates for client {client_id}...")
    result = TemplateService(supabase).initialize_default_templates(client_id)
    logger.info(
        f"Templates seeded: {result['templates_assigned']} assigned, "
        f"{result['fallback_templates_seeded']} fallback variable sets stored"
    )
    return result


def main():
    try:
        supabase = get_service_supabase()

        logger.info("Starting default data seeding...")
        settings_count = seed_settings(supabase)
        templates = seed_templates(supabase)

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {settings_count} settings, {templates['templates_assigned']} templates processed")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
