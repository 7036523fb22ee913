"""
Client for the QuickBooks bridge service.

The bridge answers bulk requests asynchronously: a request returns an
operation id, and the result is collected by polling the operation status
until it completes or fails. Polling runs on tenacity, bounded by a
PollPolicy, and can be cancelled from another thread through a
``threading.Event``.
"""

import logging
import threading
from typing import Any, Dict, FrozenSet, List, Optional

import requests
from django.conf import settings
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_when_event_set,
    wait_fixed,
)

from apps.reconciliation.exceptions import (
    BridgeCancelled,
    BridgeError,
    BridgeOperationFailed,
    BridgeTimeout,
)

logger = logging.getLogger(__name__)

STATUS_COMPLETED = 'completed'
STATUS_FAILED = 'failed'


class BridgeConfig:
    def __init__(
        self,
        endpoint: str,
        api_key: str,
        poll_interval_ms: int = 30000,
        max_poll_attempts: int = 20,
        timeout_seconds: int = 60,
    ):
        if not endpoint:
            raise BridgeError('QuickBooks bridge endpoint is not configured (QB_BRIDGE_URL)')
        self.endpoint = endpoint.rstrip('/')
        self.api_key = api_key
        self.poll_interval_ms = poll_interval_ms
        self.max_poll_attempts = max_poll_attempts
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> 'BridgeConfig':
        return cls(
            endpoint=settings.QB_BRIDGE_URL,
            api_key=settings.QB_BRIDGE_API_KEY,
            poll_interval_ms=settings.QB_BRIDGE_POLL_INTERVAL_MS,
            max_poll_attempts=settings.QB_BRIDGE_MAX_POLL_ATTEMPTS,
            timeout_seconds=settings.QB_BRIDGE_TIMEOUT_SECONDS,
        )

    def poll_policy(self) -> 'PollPolicy':
        return PollPolicy(self.poll_interval_ms, self.max_poll_attempts)


class PollPolicy:
    def __init__(
        self,
        interval_ms: int,
        max_attempts: int,
        terminal_states: FrozenSet[str] = frozenset({STATUS_COMPLETED, STATUS_FAILED}),
    ):
        self.interval_ms = interval_ms
        self.max_attempts = max_attempts
        self.terminal_states = terminal_states

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0


class BridgeOperation:
    def __init__(self, operation_id: str, status: str, data: Optional[List[dict]] = None, error: str = ''):
        self.operation_id = operation_id
        self.status = status
        self.data = data or []
        self.error = error

    def __repr__(self):
        return f"<BridgeOperation {self.operation_id} {self.status} items={len(self.data)}>"


class BridgeClient:
    def __init__(self, config: BridgeConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _get(self, path: str) -> requests.Response:
        return self.session.get(
            f"{self.config.endpoint}{path}",
            headers={'x-api-key': self.config.api_key},
            timeout=self.config.timeout_seconds,
        )

    def request_products(self) -> str:
        """Queue a bulk product export and return its operation id."""
        response = self._get('/api/products')
        if not response.ok:
            raise BridgeError(f"bridge error {response.status_code} {response.reason}")
        operation_id = response.json().get('operationId')
        if not operation_id:
            raise BridgeError('bridge response has no operationId')
        logger.info("Bridge operation queued: %s", operation_id)
        return operation_id

    def get_operation(self, operation_id: str) -> Optional[BridgeOperation]:
        """
        Fetch the current status. Returns None when the bridge answered with
        an error status or an unrecognized payload; the caller keeps polling.
        """
        response = self._get(f'/api/sync/status/{operation_id}')
        if not response.ok:
            logger.warning("Bridge status error for %s: %s", operation_id, response.status_code)
            return None

        payload: Dict[str, Any] = response.json()
        operation = payload.get('operation')
        if not payload.get('success') or not operation:
            return None

        return BridgeOperation(
            operation_id,
            operation.get('status', ''),
            data=payload.get('data') or [],
            error=operation.get('error') or '',
        )

    def wait_for_operation(
        self,
        operation_id: str,
        policy: Optional[PollPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BridgeOperation:
        """
        Poll until the operation reaches a terminal state.

        The first poll is immediate, later ones wait ``policy.interval_ms``.
        Missing statuses, error responses and request exceptions all count as
        attempts. Raises BridgeOperationFailed, BridgeTimeout or BridgeCancelled.
        """
        policy = policy or self.config.poll_policy()
        cancel_event = cancel_event or threading.Event()

        def poll() -> Optional[BridgeOperation]:
            if cancel_event.is_set():
                raise BridgeCancelled(f"polling of {operation_id} cancelled")
            logger.info("Polling bridge operation %s", operation_id)
            return self.get_operation(operation_id)

        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts) | stop_when_event_set(cancel_event),
            wait=wait_fixed(policy.interval_seconds),
            retry=(
                retry_if_result(lambda op: op is None or op.status not in policy.terminal_states)
                | retry_if_exception_type(requests.RequestException)
            ),
            sleep=cancel_event.wait,
            before_sleep=before_sleep_log(logger, logging.INFO),
        )
        try:
            operation = retrying(poll)
        except RetryError as exc:
            attempts = exc.last_attempt.attempt_number
            if cancel_event.is_set():
                raise BridgeCancelled(f"polling of {operation_id} cancelled after {attempts} attempt(s)")
            raise BridgeTimeout(f"operation {operation_id} not finished after {attempts} attempt(s)")

        if operation.status == STATUS_FAILED:
            raise BridgeOperationFailed(operation.error or 'Unknown')
        return operation

    def fetch_products(self, cancel_event: Optional[threading.Event] = None) -> List[dict]:
        operation_id = self.request_products()
        operation = self.wait_for_operation(operation_id, cancel_event=cancel_event)
        logger.info("Bridge returned %d item(s)", len(operation.data))
        return operation.data
