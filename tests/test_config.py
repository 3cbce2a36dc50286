import pytest

from config import DEFAULT_SAP_SERVICE_PATH, load_sap_settings


def _set_required(monkeypatch):
    monkeypatch.setenv("SAP_BASE_URL", "https://sap.example:44300")
    monkeypatch.setenv("AUTH_USER", "portal")
    monkeypatch.setenv("AUTH_PASS", "secret")


def test_defaults(monkeypatch):
    _set_required(monkeypatch)
    for name in ("SAP_SERVICE_PATH", "SAP_VERIFY_TLS", "SAP_CA_BUNDLE", "SAP_TIMEOUT_SECONDS", "SAP_GR_ALLOWED_VENDORS"):
        monkeypatch.delenv(name, raising=False)

    settings = load_sap_settings()

    assert settings.service_path == DEFAULT_SAP_SERVICE_PATH
    assert settings.verify is True
    assert settings.timeout_seconds == 30.0
    assert settings.goods_receipt_allowed_vendors == ()


def test_overrides(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.setenv("SAP_VERIFY_TLS", "false")
    monkeypatch.setenv("SAP_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("SAP_GR_ALLOWED_VENDORS", "100000, 0000200000")
    monkeypatch.setenv("SAP_CA_BUNDLE", "")

    settings = load_sap_settings()

    assert settings.verify is False
    assert settings.timeout_seconds == 12.5
    assert settings.goods_receipt_allowed_vendors == ("100000", "0000200000")


def test_invalid_timeout_falls_back(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.setenv("SAP_TIMEOUT_SECONDS", "soon")
    assert load_sap_settings().timeout_seconds == 30.0


def test_missing_credentials_raise(monkeypatch):
    _set_required(monkeypatch)
    monkeypatch.delenv("AUTH_PASS")
    with pytest.raises(RuntimeError, match="AUTH_PASS"):
        load_sap_settings()
