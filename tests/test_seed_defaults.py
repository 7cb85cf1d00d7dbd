from adstudio.config.default_settings import DEFAULT_SETTINGS, SETTING_CATEGORIES
from adstudio.modules.templates.fallbacks import DEFAULT_TEMPLATE_IDS
from adstudio.scripts.seed_defaults import seed_settings, seed_templates


def test_default_settings_use_known_categories():
    assert {s["category"] for s in DEFAULT_SETTINGS} <= set(SETTING_CATEGORIES)
    assert len({s["key"] for s in DEFAULT_SETTINGS}) == len(DEFAULT_SETTINGS)


def test_seed_settings_keeps_existing_values(fake_supabase):
    fake_supabase.seed("system_settings", {"key": "site_name", "value": "Custom", "category": "general"})

    created = seed_settings(fake_supabase)

    assert created == len(DEFAULT_SETTINGS) - 1
    site_name = [r for r in fake_supabase.rows("system_settings") if r["key"] == "site_name"]
    assert [r["value"] for r in site_name] == ["Custom"]
    assert seed_settings(fake_supabase) == 0


def test_seed_templates_initializes_default_client(fake_supabase):
    result = seed_templates(fake_supabase)
    assert result["templates_assigned"] == len(DEFAULT_TEMPLATE_IDS)
    assert fake_supabase.rows("client_configs")[0]["client_id"] == "default"
