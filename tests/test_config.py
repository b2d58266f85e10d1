"""
Tests for configuration management system.
"""

import pytest

from hmm_graph.config import (
    get_config, set_config, update_config,
    load_config_file, save_config_file,
    get_all_config, reset_config
)


def test_default_config():
    """Test that default configuration is loaded correctly."""
    assert get_config('model', 'tolerance') == 1e-9
    assert get_config('inference', 'enumeration_warning_length') == 12
    assert get_config('sampling', 'max_steps') == 100000
    assert get_config('logging', 'level') == 'INFO'


def test_get_config_section():
    """Test getting entire configuration sections."""
    sampling_config = get_config('sampling')
    assert isinstance(sampling_config, dict)
    assert 'random_seed' in sampling_config
    assert 'max_steps' in sampling_config


def test_set_config():
    """Test setting individual configuration values."""
    set_config('sampling', 'max_steps', 500)
    assert get_config('sampling', 'max_steps') == 500

    set_config('test_section', 'test_key', 'test_value')
    assert get_config('test_section', 'test_key') == 'test_value'


def test_update_config():
    """Test updating configuration with dictionary."""
    update_config({
        'sampling': {'random_seed': 13},
        'new_section': {'key1': 'value1'}
    })

    assert get_config('sampling', 'random_seed') == 13
    assert get_config('new_section', 'key1') == 'value1'
    assert get_config('sampling', 'max_steps') == 100000


def test_config_file_operations(temp_dir):
    """Test saving and loading configuration files."""
    config_file = temp_dir / "test_config.json"

    set_config('model', 'tolerance', 1e-6)
    set_config('test', 'value', 123)

    save_config_file(str(config_file))
    assert config_file.exists()

    reset_config()
    assert get_config('model', 'tolerance') == 1e-9
    assert get_config('test', 'value') is None

    load_config_file(str(config_file))
    assert get_config('model', 'tolerance') == 1e-6
    assert get_config('test', 'value') == 123


def test_get_all_config_is_a_copy():
    """Test that the returned dictionary is detached from the manager."""
    all_config = get_all_config()

    assert 'model' in all_config
    assert 'logging' in all_config

    all_config['sampling']['max_steps'] = 1
    assert get_config('sampling', 'max_steps') == 100000


def test_reset_config():
    """Test resetting configuration to defaults."""
    set_config('sampling', 'max_steps', 7)
    set_config('custom', 'key', 'value')

    reset_config()

    assert get_config('sampling', 'max_steps') == 100000
    assert get_config('custom', 'key') is None


def test_environment_override(monkeypatch):
    """Test environment variables override defaults on reset."""
    monkeypatch.setenv('HMM_GRAPH_RANDOM_SEED', '21')
    monkeypatch.setenv('HMM_GRAPH_MAX_STEPS', 'not-a-number')

    reset_config()

    assert get_config('sampling', 'random_seed') == 21
    assert get_config('sampling', 'max_steps') == 100000


def test_invalid_config_file(temp_dir):
    """Test handling of invalid configuration files."""
    with pytest.raises(ValueError):
        load_config_file(str(temp_dir / "nonexistent.json"))

    invalid_file = temp_dir / "invalid.json"
    invalid_file.write_text("{ invalid json }")

    with pytest.raises(ValueError):
        load_config_file(str(invalid_file))


def test_out_of_range_values_rejected():
    """Test that engine settings are range-checked."""
    with pytest.raises(ValueError, match="tolerance"):
        set_config('model', 'tolerance', 0.0)

    with pytest.raises(ValueError, match="max_steps"):
        update_config({'sampling': {'max_steps': -1}})

    assert get_config('model', 'tolerance') == 1e-9
    assert get_config('sampling', 'max_steps') == 100000
