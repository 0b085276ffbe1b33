import pydantic
import pytest

from motion_synth.config import AppConfig, PathConfig, load_config


def test_defaults():
    cfg = AppConfig()
    assert cfg.path.sample_rate == 60
    assert cfg.path.epsilon == 1e-6
    assert cfg.solver.environment_size.width == 50
    assert cfg.solver.factors.max_distance == 5.0


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == AppConfig()


def test_partial_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "solver:\n"
        "  environment_size: {width: 20, height: 10, depth: 30}\n"
        "  max_speed: 4.5\n"
        "path:\n"
        "  corner_angle_deg: 45\n"
    )
    cfg = load_config(str(path))
    assert cfg.solver.environment_size.depth == 30
    assert cfg.solver.max_speed == 4.5
    assert cfg.path.corner_angle_deg == 45
    assert cfg.path.sample_rate == 60


def test_path_config_is_frozen():
    cfg = PathConfig()
    with pytest.raises(pydantic.ValidationError):
        cfg.sample_rate = 30


def test_rejects_bad_values():
    with pytest.raises(pydantic.ValidationError):
        PathConfig(sample_rate=0)
    with pytest.raises(pydantic.ValidationError):
        PathConfig(blend_offset_fraction=0.7)
