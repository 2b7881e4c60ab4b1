import pytest

from services.llm_generate.app.model_resolver import (
    DEFAULT_MODEL,
    MODEL_ALIASES,
    MODEL_PREFIX,
    resolve_model,
)


@pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
def test_blank_input_resolves_to_default(raw) -> None:
    assert resolve_model(raw) == DEFAULT_MODEL


@pytest.mark.parametrize("alias", sorted(MODEL_ALIASES))
def test_alias_resolves_to_canonical(alias) -> None:
    assert resolve_model(alias) == MODEL_ALIASES[alias]
    assert resolve_model(f"  {alias} ") == MODEL_ALIASES[alias]


def test_alias_use_is_logged(caplog) -> None:
    with caplog.at_level("WARNING"):
        resolve_model("gemini-1.5-flash-preview-0514")
    assert "Deprecated model alias" in caplog.text


@pytest.mark.parametrize("raw", ["gpt-4o", "models/gemini-2.5-flash", "Gemini-2.5-pro", "flash"])
def test_unprefixed_input_falls_back_to_default(raw, caplog) -> None:
    with caplog.at_level("WARNING"):
        assert resolve_model(raw) == DEFAULT_MODEL
    assert "Invalid model name" in caplog.text


@pytest.mark.parametrize("raw", ["gemini-2.5-pro", " gemini-2.5-flash-lite ", "gemini-3-pro-preview"])
def test_canonical_input_is_trimmed_and_kept(raw) -> None:
    assert resolve_model(raw) == raw.strip()


def test_custom_default_is_used_for_invalid_input() -> None:
    assert resolve_model("nonsense", default="gemini-2.5-pro") == "gemini-2.5-pro"


@pytest.mark.parametrize(
    "raw",
    [None, "", "nonsense", "gemini-pro", "gemini-1.5-pro-latest", "gemini-2.5-pro", " gemini-x "],
)
def test_resolution_is_idempotent(raw) -> None:
    once = resolve_model(raw)
    assert resolve_model(once) == once
    assert once and once not in MODEL_ALIASES


def test_alias_table_values_are_canonical() -> None:
    for target in MODEL_ALIASES.values():
        assert target.startswith(MODEL_PREFIX)
        assert target not in MODEL_ALIASES


def test_alias_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        MODEL_ALIASES["gemini-new"] = "gemini-2.5-flash"  # type: ignore[index]
