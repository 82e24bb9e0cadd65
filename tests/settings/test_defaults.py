import konverge
from konverge._cogs.configs.configuration import get_settings, settings_var


async def test_declared_public_interface_and_promised_defaults():
    settings = konverge.Settings()
    assert settings.validation.deployment_timeout == 600
    assert settings.validation.deployment_interval == 10
    assert settings.validation.teardown_timeout == 600
    assert settings.validation.teardown_interval == 10
    assert settings.validation.claim_timeout == 300
    assert settings.validation.claim_interval == 10
    assert settings.labelling.max_retries == 5
    assert settings.deletion.propagation_policy == 'Foreground'
    assert settings.deletion.pod_grace_period == 0
    assert settings.networking.request_timeout == 300
    assert settings.networking.connect_timeout is None
    assert settings.networking.error_backoffs == (1, 1, 2, 3, 5)


def test_defaults_are_exposed_as_constants():
    assert konverge.DEFAULT_DEPLOYMENT_TIMEOUT == 600
    assert konverge.DEFAULT_DEPLOYMENT_INTERVAL == 10
    assert konverge.DEFAULT_TEARDOWN_TIMEOUT == 600
    assert konverge.DEFAULT_TEARDOWN_INTERVAL == 10
    assert konverge.DEFAULT_CLAIM_TIMEOUT == 300
    assert konverge.DEFAULT_CLAIM_INTERVAL == 10
    assert konverge.DEFAULT_LABEL_UPDATE_RETRIES == 5


def test_settings_are_independent():
    settings1 = konverge.Settings()
    settings2 = konverge.Settings()
    settings1.validation.claim_timeout = 1
    assert settings2.validation.claim_timeout == 300


def test_explicit_settings_win(settings_via_contextvar):
    explicit = konverge.Settings()
    assert get_settings(explicit) is explicit


def test_current_settings_are_used(settings_via_contextvar):
    assert get_settings() is settings_via_contextvar


def test_fresh_defaults_without_current_settings():
    assert settings_var.get(None) is None
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 == konverge.Settings()
    assert settings1 is not settings2
