import json

import pytest
import requests

from captacion.config import RemoteSettings, get_remote_settings
from captacion.data.schemas import CanonicalRecord
from captacion.errors import ConfigurationError, NetworkFailure
from captacion.remote.delivery import DeliveryStatus
from captacion.remote.relational import push_to_relational
from captacion.remote.sheets import push_to_sheets


class FakeResponse:
    def __init__(self, status_code=200, body=""):
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)
        self.content = self.text.encode("utf-8")

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


def _settings(policy="strict", **overrides):
    values = dict(
        sheets_url="https://script.example.test/exec",
        relational_url="https://db.example.test/",
        relational_key="secret-key",
        relational_table="clientes",
        delivery_policy=policy,
        timeout=5,
    )
    values.update(overrides)
    return RemoteSettings(**values)


def _records():
    return [CanonicalRecord(date="2024-03-10", category="SALUD", client_id="1234567",
                            client_name="Ana", agent="ANA")]


@pytest.fixture
def calls(monkeypatch):
    """Captures requests.post calls; set ``calls.response`` to control the answer."""
    class Calls(list):
        response = FakeResponse(200, {"result": "success"})

    recorded = Calls()

    def fake_post(url, **kwargs):
        recorded.append((url, kwargs))
        if isinstance(recorded.response, Exception):
            raise recorded.response
        return recorded.response

    monkeypatch.setattr(requests, "post", fake_post)
    return recorded


def test_sheets_push_confirmed(calls):
    receipt = push_to_sheets(_records(), _settings())
    assert receipt.status is DeliveryStatus.DELIVERED
    assert receipt.confirmed
    url, kwargs = calls[0]
    assert url == "https://script.example.test/exec"
    assert ("client_id", "1234567") in kwargs["data"]
    assert ("phone", "") in kwargs["data"]
    assert kwargs["timeout"] == 5


def test_unreadable_answer_depends_on_policy(calls):
    calls.response = FakeResponse(200, "")
    assert push_to_sheets(_records(), _settings("strict")).status is DeliveryStatus.UNCONFIRMED
    assert push_to_sheets(_records(), _settings("optimistic")).status is DeliveryStatus.DELIVERED


def test_sheets_error_payload_is_a_failure(calls):
    calls.response = FakeResponse(200, {"result": "error", "error": "sheet locked"})
    with pytest.raises(NetworkFailure) as exc_info:
        push_to_sheets(_records(), _settings())
    assert "sheet locked" in exc_info.value.detail


def test_sheets_requires_configuration(calls):
    with pytest.raises(ConfigurationError):
        push_to_sheets(_records(), _settings(sheets_url=None))
    assert calls == []


def test_empty_batch_is_skipped(calls):
    receipt = push_to_sheets([], _settings())
    assert receipt.status is DeliveryStatus.SKIPPED
    assert calls == []


def test_relational_push_rows_and_headers(calls):
    calls.response = FakeResponse(201, [{"ci": "1234567"}])
    receipt = push_to_relational(_records(), _settings())
    assert receipt.confirmed
    url, kwargs = calls[0]
    assert url == "https://db.example.test/rest/v1/clientes"
    assert kwargs["json"] == [
        {"ci": "1234567", "contacto": "Ana", "rubro": "SALUD", "fecha": "2024-03-10", "agente": "ANA"}
    ]
    assert kwargs["headers"]["apikey"] == "secret-key"
    assert kwargs["headers"]["Authorization"] == "Bearer secret-key"


def test_relational_error_body_is_verbatim(calls):
    body = '{"code":"23505","message":"duplicate key value violates unique constraint"}'
    calls.response = FakeResponse(409, body)
    with pytest.raises(NetworkFailure) as exc_info:
        push_to_relational(_records(), _settings())
    assert exc_info.value.detail == body
    assert exc_info.value.status_code == 409


def test_relational_requires_url_and_key(calls):
    with pytest.raises(ConfigurationError):
        push_to_relational(_records(), _settings(relational_key=None))
    assert calls == []


def test_transport_error_becomes_network_failure(calls):
    calls.response = requests.ConnectionError("connection refused")
    with pytest.raises(NetworkFailure):
        push_to_relational(_records(), _settings())


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CAPTACION_SHEETS_URL", "https://script.example.test/exec")
    monkeypatch.setenv("CAPTACION_DELIVERY_POLICY", "Optimistic")
    settings = get_remote_settings()
    assert settings.sheets_url == "https://script.example.test/exec"
    assert settings.relational_url is None
    assert settings.relational_table == "clientes"
    assert settings.delivery_policy == "optimistic"

    monkeypatch.setenv("CAPTACION_DELIVERY_POLICY", "whatever")
    assert get_remote_settings().delivery_policy == "strict"
