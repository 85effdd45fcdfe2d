"""
Unit Tests for Configuration System Module (arima_forecast/config_loader.py)

Tests core configuration loading, validation, and merging functionality.
"""

import pytest
import json
from pathlib import Path

from arima_forecast.config_loader import (
    load_config,
    validate_config,
    get_default_config,
    merge_config,
    config_to_dict,
    ConfigurationError
)


CONFIG_FILE = Path(__file__).resolve().parent.parent / 'config' / 'model_params.yml'


class TestGetDefaultConfig:
    """Test get_default_config() function."""

    def test_default_config_structure(self):
        """Test that default config has all required sections."""
        config = get_default_config()

        required_sections = ['arima', 'estimation', 'forecast', 'output']
        for section in required_sections:
            assert section in config, f"Missing section: {section}"

    def test_arima_defaults(self):
        """Test ARIMA default parameters."""
        arima = get_default_config()['arima']

        assert arima['auto'] == True
        assert arima['max_p'] == 4
        assert arima['max_d'] == 2
        assert arima['max_q'] == 3
        assert arima['information_criterion'] == 'aic'
        assert arima['order'] == [2, 1, 1]

    def test_estimation_defaults(self):
        estimation = get_default_config()['estimation']

        assert estimation['ar_ridge'] == 1e-8
        assert estimation['ma_ridge'] == 1e-6
        assert estimation['ma_iterations'] == 3

    def test_forecast_defaults(self):
        forecast = get_default_config()['forecast']

        assert forecast['steps'] == 25
        assert forecast['lower_bound'] == -20.0
        assert forecast['upper_bound'] == 100.0

    def test_returns_fresh_copy(self):
        first = get_default_config()
        first['arima']['max_p'] = 99
        assert get_default_config()['arima']['max_p'] == 4


class TestValidateConfig:
    """Test validate_config() function."""

    def test_valid_config(self):
        assert validate_config(get_default_config()) == True

    def test_missing_section(self):
        config = get_default_config()
        del config['estimation']

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(config)
        assert exc_info.value.parameter_name == 'estimation'

    @pytest.mark.parametrize("key", ['max_p', 'max_d', 'max_q'])
    @pytest.mark.parametrize("value", [-1, 1.5, True, '2'])
    def test_arima_bounds_validation(self, key, value):
        config = get_default_config()
        config['arima'][key] = value

        with pytest.raises(ConfigurationError):
            validate_config(config)

    def test_zero_bounds_allowed(self):
        config = get_default_config()
        config['arima'].update({'max_p': 0, 'max_d': 0, 'max_q': 0})
        assert validate_config(config) == True

    def test_information_criterion(self):
        config = get_default_config()
        config['arima']['information_criterion'] = 'bic'
        assert validate_config(config) == True

        config['arima']['information_criterion'] = 'hqic'
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(config)
        assert exc_info.value.parameter_name == 'arima.information_criterion'

    @pytest.mark.parametrize("order", [[1, 1], [1, -1, 0], [1.0, 1, 0], 'abc'])
    def test_order_validation(self, order):
        config = get_default_config()
        config['arima']['order'] = order

        with pytest.raises(ConfigurationError):
            validate_config(config)

    @pytest.mark.parametrize("key", ['ar_ridge', 'ma_ridge'])
    def test_ridge_must_be_positive(self, key):
        config = get_default_config()
        config['estimation'][key] = 0

        with pytest.raises(ConfigurationError):
            validate_config(config)

    def test_ma_iterations_positive(self):
        config = get_default_config()
        config['estimation']['ma_iterations'] = 0

        with pytest.raises(ConfigurationError):
            validate_config(config)

    def test_negative_steps(self):
        config = get_default_config()
        config['forecast']['steps'] = -5

        with pytest.raises(ConfigurationError):
            validate_config(config)

    def test_bounds_order(self):
        """lower_bound must stay strictly below upper_bound."""
        config = get_default_config()
        config['forecast']['lower_bound'] = 100.0

        with pytest.raises(ConfigurationError):
            validate_config(config)

        config['forecast']['lower_bound'] = 0
        assert validate_config(config) == True

    def test_output_format(self):
        config = get_default_config()
        config['output']['format'] = 'xlsx'

        with pytest.raises(ConfigurationError):
            validate_config(config)


class TestLoadConfig:
    """Test load_config() function."""

    def test_load_default_config(self):
        config = load_config()
        assert config is not None
        assert 'arima' in config
        assert 'estimation' in config

    def test_load_from_yaml(self):
        """The shipped YAML file mirrors the built-in defaults."""
        config = load_config(str(CONFIG_FILE))

        assert config == get_default_config()

    def test_missing_file_fallback(self, tmp_path):
        config = load_config(str(tmp_path / 'nonexistent.yml'))
        assert config == get_default_config()

    def test_partial_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / 'partial.yml'
        path.write_text("arima:\n  max_p: 2\nforecast:\n  steps: 10\n")

        config = load_config(str(path))

        assert config['arima']['max_p'] == 2
        assert config['arima']['max_q'] == 3
        assert config['forecast']['steps'] == 10

    def test_json_file(self, tmp_path):
        path = tmp_path / 'params.json'
        path.write_text(json.dumps({'arima': {'information_criterion': 'bic'}}))

        assert load_config(str(path))['arima']['information_criterion'] == 'bic'

    def test_unparsable_file_falls_back(self, tmp_path):
        path = tmp_path / 'broken.yml'
        path.write_text("arima: [unclosed\n")

        assert load_config(str(path)) == get_default_config()

    def test_non_mapping_file_falls_back(self, tmp_path):
        path = tmp_path / 'list.yml'
        path.write_text("- 1\n- 2\n")

        assert load_config(str(path)) == get_default_config()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / 'invalid.yml'
        path.write_text("forecast:\n  steps: -1\n")

        with pytest.raises(ConfigurationError):
            load_config(str(path))


class TestMergeConfig:
    """Test merge_config() function."""

    def test_deep_merge(self):
        base = get_default_config()
        overrides = {
            'arima': {'max_p': 6},
            'forecast': {'steps': 10}
        }

        merged = merge_config(base, overrides)

        assert merged['arima']['max_p'] == 6
        assert merged['arima']['max_d'] == 2  # Preserved
        assert merged['forecast']['steps'] == 10
        assert merged['forecast']['upper_bound'] == 100.0  # Preserved

    def test_lists_are_replaced(self):
        merged = merge_config(get_default_config(), {'arima': {'order': [1, 0, 0]}})
        assert merged['arima']['order'] == [1, 0, 0]

    def test_merge_preserves_base(self):
        base = get_default_config()
        merge_config(base, {'arima': {'max_p': 1}})

        assert base['arima']['max_p'] == 4

    def test_merge_validates_result(self):
        with pytest.raises(ConfigurationError):
            merge_config(get_default_config(), {'arima': {'information_criterion': 'mdl'}})

    def test_empty_overrides(self):
        base = get_default_config()
        assert merge_config(base, {}) == base


class TestConfigToDict:
    """Test config_to_dict() function."""

    def test_flatten_config(self):
        flat = config_to_dict(get_default_config())

        assert flat['arima.max_p'] == '4'
        assert flat['arima.order'] == '[2, 1, 1]'
        assert flat['output.include_candidates'] == 'True'

    def test_all_keys_present(self):
        config = get_default_config()
        flat = config_to_dict(config)

        expected_keys = sum(len(section) for section in config.values())
        assert len(flat) == expected_keys


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
