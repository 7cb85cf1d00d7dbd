from adstudio.modules.templates.variables import (
    build_variable_types, infer_variable, normalize_variable, normalize_variables,
)


def test_infer_variable_from_name():
    assert infer_variable("product_image").type == "image_url"
    assert infer_variable("product_image").char_limit == 500
    assert infer_variable("website_url").type == "url"
    assert infer_variable("website_url").char_limit == 500
    text = infer_variable("product_name")
    assert (text.type, text.char_limit, text.required) == ("text", 100, True)


def test_normalize_accepts_alternate_key_spellings():
    spellings = [
        {"name": "headline", "type": "text", "charLimit": 40},
        {"key": "headline", "type": "text", "char_limit": 40},
        {"variable_name": "headline", "variable_type": "text", "maxLength": 40},
        {"variableName": "headline", "variableType": "text", "max_length": 40},
    ]
    for raw in spellings:
        variable = normalize_variable(raw)
        assert variable.name == "headline"
        assert variable.type == "text"
        assert variable.char_limit == 40


def test_normalize_defaults_missing_or_invalid_limit():
    assert normalize_variable({"name": "a"}).char_limit == 500
    assert normalize_variable({"name": "a", "charLimit": "abc"}).char_limit == 500
    assert normalize_variable({"name": "a", "charLimit": 0}).char_limit == 500
    assert normalize_variable({"name": "a", "charLimit": "25"}).char_limit == 25


def test_normalize_maps_type_aliases():
    assert normalize_variable({"name": "logo", "type": "image"}).type == "image_url"
    assert normalize_variable({"name": "title", "type": "String"}).type == "text"


def test_normalize_mapping_keyed_by_name():
    raw = {
        "product_name": {"type": "text", "properties": {"content": ""}},
        "hero": {"type": "image", "required": True},
    }
    variables = normalize_variables(raw)
    assert [v.name for v in variables] == ["product_name", "hero"]
    assert variables[1].type == "image_url"
    assert variables[1].required is True
    assert variables[0].required is False


def test_normalize_list_drops_duplicates_and_nameless_entries():
    raw = [
        "product_name",
        {"name": "product_name", "charLimit": 10},
        {"type": "text"},
        "",
        {"key": "price"},
    ]
    variables = normalize_variables(raw)
    assert [v.name for v in variables] == ["product_name", "price"]
    assert variables[0].char_limit == 100


def test_normalize_variables_rejects_unsupported_payload():
    assert normalize_variables(None) == []
    assert normalize_variables("product_name") == []
    assert normalize_variables(42) == []


def test_build_variable_types_keys_by_name():
    variables = normalize_variables(["a", "b_image"])
    types = build_variable_types(variables)
    assert set(types) == {"a", "b_image"}
    assert types["b_image"].type == "image_url"
