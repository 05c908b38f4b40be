import pytest

from peertutor.core import config


def test_validate_runtime_config_rejects_default_secret_in_production(monkeypatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError, match='JWT_SECRET_KEY'):
        config.validate_runtime_config()


def test_validate_runtime_config_rejects_inverted_page_sizes(monkeypatch) -> None:
    monkeypatch.setattr(config, 'DEFAULT_PAGE_SIZE', 50)
    monkeypatch.setattr(config, 'MAX_PAGE_SIZE', 20)

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_get_list_splits_and_trims() -> None:
    assert config._get_list(' https://a.example , ,https://b.example', []) == [
        'https://a.example',
        'https://b.example',
    ]
    assert config._get_list(None, ['fallback']) == ['fallback']
