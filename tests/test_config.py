
import pytest
import time
from unittest.mock import MagicMock, patch
from feedrank.config import ConfigManager, FeedConfig

@pytest.fixture
def mock_ssm_client():
    with patch('feedrank.config.boto3.client') as mock:
        yield mock.return_value

def test_default_values(mock_ssm_client):
    """設定が取得できない場合、安全なデフォルト値(全ファクター)を返すこと"""
    mock_ssm_client.get_parameters.side_effect = Exception("SSM Error")

    manager = ConfigManager()
    config = manager.get_config()

    assert config.selected_factors == frozenset()
    assert config.default_user_experience_level == 5
    assert config.number_of_articles == 50
    assert config.parallel_enabled is False
    assert config.factor_overrides == {}

def test_get_config_ssm_success(mock_ssm_client):
    """SSMから設定が正しく取得できること"""
    mock_ssm_client.get_parameters.return_value = {
        'Parameters': [
            {'Name': '/feed/weighted/selected_factors', 'Value': 'daily_decay_factor, spaminess_factor,'},
            {'Name': '/feed/weighted/default_user_experience_level', 'Value': '3'},
            {'Name': '/feed/weighted/number_of_articles', 'Value': '25'},
            {'Name': '/feed/weighted/parallel_enabled', 'Value': 'TRUE'},
            {'Name': '/feed/weighted/factor_overrides',
             'Value': '{"spaminess_factor": {"steps": [[0, 1]], "fallback_weight": 0.1}}'},
        ]
    }

    manager = ConfigManager()
    config = manager.get_config()

    assert config.selected_factors == frozenset({'daily_decay_factor', 'spaminess_factor'})
    assert config.default_user_experience_level == 3
    assert config.number_of_articles == 25
    assert config.parallel_enabled is True
    assert config.factor_overrides == {'spaminess_factor': {'steps': [[0, 1]], 'fallback_weight': 0.1}}

    mock_ssm_client.get_parameters.assert_called_once()
    assert '/feed/weighted/selected_factors' in mock_ssm_client.get_parameters.call_args[1]['Names']

def test_invalid_overrides_return_default(mock_ssm_client):
    mock_ssm_client.get_parameters.return_value = {
        'Parameters': [
            {'Name': '/feed/weighted/number_of_articles', 'Value': '10'},
            {'Name': '/feed/weighted/factor_overrides', 'Value': '[1, 2]'},
        ]
    }

    config = ConfigManager().get_config()

    assert config == FeedConfig()

def test_config_caching(mock_ssm_client):
    """設定がTTL内でキャッシュされること"""
    mock_ssm_client.get_parameters.return_value = {
        'Parameters': [
            {'Name': '/feed/weighted/number_of_articles', 'Value': '7'}
        ]
    }

    manager = ConfigManager(ttl_seconds=60)

    config1 = manager.get_config()
    assert config1.number_of_articles == 7

    config2 = manager.get_config()
    assert config2.number_of_articles == 7

    assert mock_ssm_client.get_parameters.call_count == 1

def test_config_cache_expiration(mock_ssm_client):
    """TTL経過後に再取得すること"""
    mock_ssm_client.get_parameters.return_value = {'Parameters': []}

    manager = ConfigManager(ttl_seconds=0.1)

    manager.get_config()
    time.sleep(0.2) # TTL切れ待ち
    manager.get_config()

    assert mock_ssm_client.get_parameters.call_count == 2

def test_to_scoring_configuration():
    config = FeedConfig(
        selected_factors=frozenset({'spaminess_factor'}),
        default_user_experience_level=2,
    )

    scoring = config.to_scoring_configuration('user1', user_experience_level=4)

    assert scoring.selected_factors == frozenset({'spaminess_factor'})
    assert scoring.user_id == 'user1'
    assert scoring.context_parameters == {
        'user_id': 'user1',
        'default_user_experience_level': 2,
        'user_experience_level': 4,
    }
