"""Testes da taxonomia de erros de entrega."""

from __future__ import annotations

import pytest

from api.connectors.twilio.errors import (
    DeliveryErrorKind,
    classify_provider_error,
    classify_transport_error,
    user_message_for,
)
from app.protocols.messaging_transport import TransportError


@pytest.mark.parametrize(
    ("code", "status_code", "expected"),
    [
        (21211, 400, DeliveryErrorKind.INVALID_RECIPIENT),
        (21408, 400, DeliveryErrorKind.OPT_OUT),
        (21610, 400, DeliveryErrorKind.CONTENT_FILTERED),
        (21614, 400, DeliveryErrorKind.UNREGISTERED),
        (63007, 400, DeliveryErrorKind.UNREGISTERED),
        (None, 429, DeliveryErrorKind.UPSTREAM_RATE_LIMIT),
        (None, 201, DeliveryErrorKind.UNCONFIRMED),
        (None, 200, DeliveryErrorKind.UNCONFIRMED),
        (99999, 500, DeliveryErrorKind.TRANSIENT),
        (None, None, DeliveryErrorKind.TRANSIENT),
    ],
)
def test_classify_provider_error(code, status_code, expected) -> None:
    assert classify_provider_error(code, status_code) is expected


def test_classify_transport_error_reads_exception_fields() -> None:
    exc = TransportError("twilio_api_error", code=21211, status_code=400)
    assert classify_transport_error(exc) is DeliveryErrorKind.INVALID_RECIPIENT


def test_only_transient_is_retryable() -> None:
    retryable = {kind for kind in DeliveryErrorKind if kind.is_retryable}
    assert retryable == {DeliveryErrorKind.TRANSIENT}


def test_every_kind_has_user_message() -> None:
    for kind in DeliveryErrorKind:
        assert user_message_for(kind)
