import pytest

from mission_plan.config_loader import ConfigLoader, DEFAULT_CONFIG_PATH
from mission_plan.dialects.exceptions import ConfigError
from mission_plan.dialects.vocabulary import BehaviorTreeVocabulary


def test_default_config_loads():
    config = ConfigLoader(DEFAULT_CONFIG_PATH)

    params = config.get_projection_params()
    assert params["earth_radius_m"] == 6378137.0
    assert params["coordinate_tolerance"] == 1e-9
    assert set(config.get_action_tags()) == set(BehaviorTreeVocabulary.ACTION_TAGS)


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "projection:\n"
        "  earth_radius_m: 6371000\n"
        "  coordinate_tolerance: 0.000001\n"
        "  min_cos_latitude: 0.001\n"
        "dialects:\n"
        "  action_tags: [MoveToGPSLocation]\n"
    )
    monkeypatch.setenv("MISSION_PLAN_CONFIG", str(path))

    config = ConfigLoader()

    assert config.get_projection_params()["earth_radius_m"] == 6371000.0
    assert config.get_projection_params()["initial_heading_deg"] == 0.0
    assert config.get_action_tags() == ["MoveToGPSLocation"]


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigLoader(str(tmp_path / "absent.yaml"))


def test_missing_section_raises(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("projection:\n  earth_radius_m: 1\n  coordinate_tolerance: 1\n  min_cos_latitude: 1\n")

    with pytest.raises(ConfigError, match="dialects"):
        ConfigLoader(str(path))


def test_non_positive_radius_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "projection:\n  earth_radius_m: 0\n  coordinate_tolerance: 1\n  min_cos_latitude: 1\n"
        "dialects:\n  action_tags: []\n"
    )

    with pytest.raises(ConfigError, match="earth_radius_m"):
        ConfigLoader(str(path))


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("projection: [unclosed\n")

    with pytest.raises(ConfigError):
        ConfigLoader(str(path))
