"""
Normalization of template variables into the uniform `{name, type, charLimit}` schema.

Variable lists arrive in several shapes: bare names from the fallback tables,
HeyGen v2 detail objects keyed by variable name, and list entries that spell
their fields as `name`/`key`/`variable_name` and `charLimit`/`char_limit`/
`maxLength`/`max_length`.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from adstudio.modules.templates.schemas import TemplateVariable

logger = logging.getLogger(__name__)

NAME_KEYS = ("name", "key", "variable_name", "variableName")
TYPE_KEYS = ("type", "variable_type", "variableType")
LIMIT_KEYS = ("charLimit", "char_limit", "maxLength", "max_length")

TYPE_ALIASES = {
    "image": "image_url",
    "string": "text",
}

TEXT_CHAR_LIMIT = 100
URL_CHAR_LIMIT = 500
UPSTREAM_DEFAULT_CHAR_LIMIT = 500


def infer_variable(name: str) -> TemplateVariable:
    """Guess type and limit for a bare variable name."""
    if "image" in name:
        var_type = "image_url"
    elif "url" in name:
        var_type = "url"
    else:
        var_type = "text"
    char_limit = URL_CHAR_LIMIT if var_type != "text" else TEXT_CHAR_LIMIT
    return TemplateVariable(name=name, type=var_type, char_limit=char_limit, required=True)


def _first(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_limit(value: Any) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return UPSTREAM_DEFAULT_CHAR_LIMIT
    return limit if limit > 0 else UPSTREAM_DEFAULT_CHAR_LIMIT


def normalize_variable(raw: Any, name: Optional[str] = None) -> Optional[TemplateVariable]:
    if isinstance(raw, str):
        return infer_variable(raw) if raw.strip() else None
    if not isinstance(raw, Mapping):
        return infer_variable(name) if name else None

    var_name = _first(raw, NAME_KEYS) or name
    if not var_name:
        return None
    var_type = str(_first(raw, TYPE_KEYS) or "text").lower()
    return TemplateVariable(
        name=str(var_name),
        type=TYPE_ALIASES.get(var_type, var_type),
        char_limit=_as_limit(_first(raw, LIMIT_KEYS)),
        required=bool(raw.get("required", False)),
        description=str(raw.get("description") or ""),
    )


def normalize_variables(raw: Any) -> List[TemplateVariable]:
    """Normalize a list or name-keyed mapping of variables, dropping duplicates and nameless entries."""
    if not raw:
        return []
    if isinstance(raw, Mapping):
        candidates = [normalize_variable(value, name=str(key)) for key, value in raw.items()]
    elif isinstance(raw, (list, tuple)):
        candidates = [normalize_variable(item) for item in raw]
    else:
        logger.warning(f"Unsupported variables payload of type {type(raw).__name__}")
        return []

    seen = set()
    variables = []
    for variable in candidates:
        if variable is None or variable.name in seen:
            continue
        seen.add(variable.name)
        variables.append(variable)
    return variables


def build_variable_types(variables: Iterable[TemplateVariable]) -> Dict[str, TemplateVariable]:
    return {v.name: v for v in variables}
