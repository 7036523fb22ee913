import threading
from unittest import mock

import pytest
import requests

from apps.reconciliation.exceptions import (
    BridgeCancelled,
    BridgeError,
    BridgeOperationFailed,
    BridgeTimeout,
)
from apps.reconciliation.services.bridge import BridgeClient, BridgeConfig, PollPolicy


def _response(payload, status_code=200):
    response = mock.Mock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.reason = 'OK' if response.ok else 'Error'
    response.json.return_value = payload
    return response


def _status(status, data=None, error=None):
    return _response({
        'success': True,
        'operation': {'status': status, 'error': error},
        'data': data or [],
    })


def _client(*status_responses, queued=None):
    session = mock.Mock()
    session.get.side_effect = [queued or _response({'operationId': 'op-1'})] + list(status_responses)
    config = BridgeConfig('http://bridge.local/', 'secret', poll_interval_ms=0, max_poll_attempts=3)
    return BridgeClient(config, session=session), session


class TestBridgeConfig:
    def test_endpoint_required(self):
        with pytest.raises(BridgeError):
            BridgeConfig('', 'secret')

    def test_from_settings(self, settings):
        settings.QB_BRIDGE_URL = 'http://bridge.local'
        settings.QB_BRIDGE_API_KEY = 'secret'
        settings.QB_BRIDGE_POLL_INTERVAL_MS = 500
        settings.QB_BRIDGE_MAX_POLL_ATTEMPTS = 4

        policy = BridgeConfig.from_settings().poll_policy()

        assert policy.interval_seconds == 0.5
        assert policy.max_attempts == 4


class TestBridgeClient:
    def test_fetch_products_polls_until_completed(self):
        items = [{'ListID': 'QB-1', 'SalesPrice': '12.50'}]
        client, session = _client(_status('pending'), _status('completed', data=items))

        assert client.fetch_products() == items
        first_call = session.get.call_args_list[0]
        assert first_call.args[0] == 'http://bridge.local/api/products'
        assert first_call.kwargs['headers'] == {'x-api-key': 'secret'}
        assert session.get.call_args_list[1].args[0] == 'http://bridge.local/api/sync/status/op-1'

    def test_failed_operation(self):
        client, _ = _client(_status('failed', error='QB offline'))

        with pytest.raises(BridgeOperationFailed, match='QB offline'):
            client.fetch_products()

    def test_timeout_after_max_attempts(self):
        client, session = _client(_status('pending'), _status('pending'), _status('pending'))

        with pytest.raises(BridgeTimeout):
            client.fetch_products()
        assert session.get.call_count == 4

    def test_transient_errors_keep_polling(self):
        client, _ = _client(
            requests.ConnectionError('reset'),
            _response({}, status_code=502),
            _status('completed', data=[{'ListID': 'QB-1'}]),
        )

        assert client.fetch_products() == [{'ListID': 'QB-1'}]

    def test_cancelled(self):
        client, session = _client(_status('completed'))
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(BridgeCancelled):
            client.fetch_products(cancel_event=cancel)
        assert session.get.call_count == 1

    def test_missing_operation_id(self):
        client, _ = _client(queued=_response({}))

        with pytest.raises(BridgeError):
            client.request_products()

    def test_custom_terminal_states(self):
        client, _ = _client()
        client.session.get.side_effect = [_status('archived', data=[{'ListID': 'x'}])]
        policy = PollPolicy(0, 1, terminal_states=frozenset({'archived'}))

        operation = client.wait_for_operation('op-1', policy=policy)

        assert operation.status == 'archived'

    def test_cancel_between_polls(self):
        cancel = threading.Event()

        def pending_then_cancel(*args, **kwargs):
            cancel.set()
            return _status('pending')

        client, session = _client()
        session.get.side_effect = pending_then_cancel

        with pytest.raises(BridgeCancelled, match='after 1 attempt'):
            client.wait_for_operation('op-1', cancel_event=cancel)
        assert session.get.call_count == 1

    def test_request_errors_count_as_attempts(self):
        client, session = _client(
            requests.ConnectionError('reset'),
            requests.Timeout('slow'),
            requests.ConnectionError('reset'),
        )

        with pytest.raises(BridgeTimeout, match='after 3 attempt'):
            client.fetch_products()
        assert session.get.call_count == 4

    def test_waits_policy_interval_between_polls(self):
        client, _ = _client()
        client.session.get.side_effect = [_status('pending'), _status('completed')]
        cancel = mock.Mock(spec=threading.Event)
        cancel.is_set.return_value = False
        cancel.wait.return_value = False

        client.wait_for_operation('op-1', policy=PollPolicy(250, 3), cancel_event=cancel)

        cancel.wait.assert_called_once_with(0.25)
