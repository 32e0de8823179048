import copy

import pytest
import yaml

from mentoring_autotest.ui_testing.framework.suite_config import (
    _DEFAULTS,
    ConfigLoader,
    ConfigurationError,
    NameHeuristic,
    Retries,
    SuiteConfig,
)


def _write_config(tmp_path, data):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(data), encoding="utf-8")
    return config_path


PROFILED = {
    "defaults": {"timeouts": {"page_load": 45000}},
    "profiles": {
        "development": {},
        "staging": {"urls": {"base": "https://staging.example.test"}, "retries": {"ci": 3}},
    },
}


def test_profile_is_selected_from_env(clean_config_env, monkeypatch, tmp_path):
    monkeypatch.setenv("TEST_ENV", "staging")

    loader = ConfigLoader(config_path=_write_config(tmp_path, PROFILED))
    config = loader.suite_config()

    assert config.profile == "staging"
    assert config.urls.base == "https://staging.example.test"
    assert config.urls.mentoring_url == "https://staging.example.test/mentoring"
    assert config.timeouts.page_load == 45000
    assert config.retries == Retries(ci=3, local=1)


def test_unknown_profile_falls_back_to_development(clean_config_env, monkeypatch, tmp_path):
    monkeypatch.setenv("TEST_ENV", "qa-42")

    loader = ConfigLoader(config_path=_write_config(tmp_path, PROFILED))

    assert loader.profile == "development"
    assert loader.get("urls.base") == _DEFAULTS["urls"]["base"]


def test_env_overrides_win_over_file(clean_config_env, monkeypatch, tmp_path):
    monkeypatch.setenv("UI_BASE_URL", "http://localhost:3000")
    monkeypatch.setenv("TIMEOUTS_PAGE_LOAD", "60000")

    config = ConfigLoader(config_path=_write_config(tmp_path, PROFILED)).suite_config()

    assert config.urls.base == "http://localhost:3000"
    assert config.timeouts.page_load == 60000


def test_missing_file_uses_builtin_defaults(clean_config_env, tmp_path):
    loader = ConfigLoader(config_path=tmp_path / "absent.yaml")

    assert loader.get("readiness.min_words") == 50
    assert loader.get("readiness.unknown", "fallback") == "fallback"
    assert loader.suite_config().readiness.settle_delay == 2000


def test_invalid_yaml_is_a_configuration_error(clean_config_env, tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("timeouts: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        ConfigLoader(config_path=config_path)


def test_reload_picks_up_file_changes(clean_config_env, tmp_path):
    config_path = _write_config(tmp_path, {"defaults": {"readiness": {"min_words": 10}}})
    loader = ConfigLoader(config_path=config_path)
    assert loader.suite_config().readiness.min_words == 10

    _write_config(tmp_path, {"defaults": {"readiness": {"min_words": 25}}})
    loader.reload()

    assert loader.suite_config().readiness.min_words == 25


def test_bad_value_is_a_configuration_error():
    data = copy.deepcopy(_DEFAULTS)
    data["timeouts"]["page_load"] = "soon"

    with pytest.raises(ConfigurationError, match="development"):
        SuiteConfig.from_dict("development", data)


def test_viewport_presets(suite_config):
    assert suite_config.viewport("tablet").as_size() == {"width": 1024, "height": 768}
    assert suite_config.viewport("mobile-small").width == 320
    assert [v.name for v in suite_config.responsive_matrix][0] == "desktop-large"

    with pytest.raises(ConfigurationError):
        suite_config.viewport("smartwatch")


def test_scenario_data(suite_config):
    data = suite_config.scenario_data

    assert "Software Engineer" in data.valid_search_terms
    assert "x" * 1000 in data.invalid_search_terms
    assert data.category_list("design") == ("Design", "UX", "UI", "Creative")
    assert "Technology" in data.category_list()


def test_name_heuristic():
    heuristic = NameHeuristic(max_words=4, max_length=100, excluded_phrases=("mentoring", "karir"))

    assert heuristic.matches("Jane Doe")
    assert heuristic.matches("  Budi Santoso  ")
    assert not heuristic.matches("")
    assert not heuristic.matches("Program Mentoring Karir")
    assert not heuristic.matches("one two three four five")
    assert not heuristic.matches("x" * 100)


def test_retries_for_environment():
    retries = Retries(ci=2, local=1)

    assert retries.for_environment(is_ci=True) == 2
    assert retries.for_environment(is_ci=False) == 1
