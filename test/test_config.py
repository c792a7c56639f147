import pytest

from fabrik_chain import ChainConfigurationError, SolveConfig
from fabrik_chain.config import config_from_dict, load_config


def test_defaults():
    config = SolveConfig()
    assert config.tolerance == 0.1
    assert config.max_iterations is None
    assert config.lengths is None
    assert config.stall_threshold is None


def test_flat_mapping():
    config = config_from_dict({"tolerance": 0.01, "max_iterations": 50})
    assert config.tolerance == 0.01
    assert config.max_iterations == 50


def test_ros_parameter_layout():
    data = {
        "fabrik_chain": {
            "ros__parameters": {
                "tolerance": 0.005,
                "max_iterations": -1,
                "lengths": [1.0, 2.0],
            }
        }
    }
    config = config_from_dict(data)
    assert config.tolerance == 0.005
    assert config.max_iterations is None
    assert list(config.lengths) == [1.0, 2.0]


def test_unknown_key_is_rejected():
    with pytest.raises(ChainConfigurationError, match="tolerence"):
        config_from_dict({"tolerence": 0.1})


def test_invalid_value_is_rejected():
    with pytest.raises(ChainConfigurationError):
        config_from_dict({"tolerance": -1.0})


def test_non_mapping_is_rejected():
    with pytest.raises(ChainConfigurationError):
        config_from_dict([0.1, 10])


def test_load_config(tmp_path):
    path = tmp_path / "fabrik.yaml"
    path.write_text("tolerance: 0.02\nmax_iterations: 30\nstall_threshold: 1.0e-9\n")

    config = load_config(str(path))
    assert config.tolerance == 0.02
    assert config.max_iterations == 30
    assert config.stall_threshold == 1e-9


def test_load_empty_config_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == SolveConfig()


def test_load_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("tolerance: [0.1\n")
    with pytest.raises(ChainConfigurationError):
        load_config(str(path))
