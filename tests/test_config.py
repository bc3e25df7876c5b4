import pytest

from occurrence_engine.config import DEFAULT_OPERATORS, OccurrenceConfig


def test_defaults() -> None:
    config = OccurrenceConfig()

    assert config.tie_break == "insertion"
    assert config.indent_unit == "    "
    assert config.operator_name("d") == "delete"
    assert config.operator_name("delete") == "delete"
    assert dict(config.operators) == dict(DEFAULT_OPERATORS)


def test_disabled_alias_resolves_to_none() -> None:
    config = OccurrenceConfig(operators={"d": False, "x": "delete"})

    assert config.operator_name("d") is None
    assert config.operator_name("x") == "delete"


@pytest.mark.parametrize(
    "overrides",
    [
        {"tie_break": "random"},
        {"shiftwidth": 0},
        {"default_register": ""},
        {"operators": {"": "delete"}},
        {"operators": {"d": True}},
    ],
)
def test_invalid_values_are_rejected(overrides: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        OccurrenceConfig(**overrides)  # type: ignore[arg-type]


def test_with_overrides_revalidates() -> None:
    config = OccurrenceConfig().with_overrides(shiftwidth=2, expand_tab=False)

    assert config.shiftwidth == 2
    assert config.indent_unit == "\t"
    with pytest.raises(ValueError):
        config.with_overrides(shiftwidth=-1)


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCCURRENCE_TIE_BREAK", "longest")
    monkeypatch.setenv("OCCURRENCE_IGNORE_CASE", "yes")
    monkeypatch.setenv("OCCURRENCE_SHIFTWIDTH", "2")
    monkeypatch.setenv("OCCURRENCE_AUTO_DISPOSE", "1")

    config = OccurrenceConfig.from_env(expand_tab=False)

    assert config.tie_break == "longest"
    assert config.ignore_case
    assert config.shiftwidth == 2
    assert config.auto_dispose
    assert not config.expand_tab
