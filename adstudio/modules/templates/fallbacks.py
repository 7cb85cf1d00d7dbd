# Built-in templates for the default client, used when the database holds no configuration
from typing import Dict, List

from adstudio.modules.templates.schemas import ClientTemplateConfig

DEFAULT_CLIENT_ID = "default"

DEFAULT_FALLBACK_VARIABLES: Dict[str, List[str]] = {
    "bccf8cfb2b1e422dbc425755f1b7dc67": [
        "product_name", "product_price", "product_discount", "category_name",
        "feature_one", "feature_two", "feature_three", "website_description", "product_image",
    ],
    "3bb2bf2276754c0ea6b235db9409f508": [
        "product_name", "main_feature", "benefit_one", "benefit_two",
        "call_to_action", "brand_name", "product_image",
    ],
    "47a53273dcd0428bbe7bf960b8bf7f02": [
        "brand_name", "product_name", "brand_story", "unique_value",
        "customer_testimonial", "product_image", "website_url",
    ],
    "aeec955f97a6476d88e4547adfeb3c97": [
        "product_name", "product_price", "discount_percent", "brand_name",
        "urgency_text", "product_image", "cta_text",
    ],
}

DEFAULT_TEMPLATE_IDS: List[str] = list(DEFAULT_FALLBACK_VARIABLES)


def default_client_config() -> ClientTemplateConfig:
    return ClientTemplateConfig(
        client_id=DEFAULT_CLIENT_ID,
        assigned_template_ids=list(DEFAULT_TEMPLATE_IDS),
        fallback_variables={k: list(v) for k, v in DEFAULT_FALLBACK_VARIABLES.items()},
    )


def fallback_variables_for(template_id: str) -> List[str]:
    return list(DEFAULT_FALLBACK_VARIABLES.get(template_id, []))
