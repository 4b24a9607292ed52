"""HTTP client for the remote user directory.

Every operation returns an :class:`Outcome` instead of raising. Each
upstream call goes through one retry loop: transient failures (network
errors, 5xx) are retried a fixed number of times with a fixed delay; 4xx
responses are surfaced immediately.
"""
from __future__ import annotations
import datetime
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from ..models import DirectoryRecord, Role, UpdateRequest
from ..outcome import FailureKind, Outcome
from ..validators import is_blank, validate_for_creation
from .merge import merge_update

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 5
MAX_RETRY_ATTEMPTS = 3
DELAY_SECONDS = 1.0
POOL_SIZE = 10


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-count, fixed-delay retry (no backoff, no jitter).

    Attributes:
        max_retries: Attempts after the first one
        delay: Seconds to wait between attempts
    """
    max_retries: int = MAX_RETRY_ATTEMPTS
    delay: float = DELAY_SECONDS

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def build_session(pool_size: int = POOL_SIZE) -> requests.Session:
    """Create the pooled HTTP session shared by all requests in a process.

    urllib3-level retries are disabled; the client runs its own loop.
    """
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({
        "Accept": "application/json",
        "User-Agent": "directory-gateway/1.0",
    })
    return session


class DirectoryClient:
    """Client for the directory microservice.

    Configuration is fixed at construction and the client holds no other
    state, so one instance is shared by all request threads.

    Usage:
        client = DirectoryClient("http://directory:8081/api")
        outcome = client.get_by_id(7)
        if outcome.ok:
            print(outcome.value.email)
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        retry: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime.date] = datetime.date.today,
    ):
        """Initialize directory client.

        Args:
            base_url: Directory base URL, e.g. http://directory:8081/api
            session: HTTP session (defaults to a new pooled session)
            timeout: Per-attempt timeout in seconds
            retry: Retry policy (defaults to 3 retries, 1 second apart)
            sleep: Called with the delay between attempts
            clock: Returns today's date for birthday checks
        """
        self._base_url = base_url.rstrip("/")
        self._session = session if session is not None else build_session()
        self._timeout = timeout
        self._retry = retry or RetryPolicy()
        self._sleep = sleep
        self._clock = clock

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def retry(self) -> RetryPolicy:
        return self._retry

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    # ─────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────

    def get_by_id(self, record_id: int) -> Outcome[DirectoryRecord]:
        """Fetch one record by id. Any 4xx from the directory means NOT_FOUND."""
        invalid = _check_id(record_id)
        if invalid:
            return invalid
        logger.info(f"Request record {record_id} from directory")
        outcome = self._send("GET", f"/{record_id}", f"get_by_id({record_id})", FailureKind.NOT_FOUND)
        outcome = self._decode_record(outcome, f"get_by_id({record_id})")
        if outcome.ok:
            logger.info(f"Confirm record {record_id} from directory")
        return outcome

    def get_by_email(self, email: str) -> Outcome[DirectoryRecord]:
        """Fetch one record by email address."""
        if is_blank(email):
            return Outcome.failure(FailureKind.VALIDATION_FAILED, "email is required", field="email")
        logger.info("Request record by email from directory")
        outcome = self._send(
            "GET",
            f"/email/{quote(email.strip(), safe='@')}",
            "get_by_email",
            FailureKind.NOT_FOUND,
        )
        outcome = self._decode_record(outcome, "get_by_email")
        if outcome.ok:
            logger.info("Confirm record by email from directory")
        return outcome

    def list_all(self) -> Outcome[List[DirectoryRecord]]:
        """Fetch every record, in the order the directory returns them."""
        logger.info("Request all records from directory")
        outcome = self._send("GET", "/all", "list_all", FailureKind.UPSTREAM_REJECTED)
        if not outcome.ok:
            return outcome
        try:
            payload = outcome.value.json()
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array")
            records = [DirectoryRecord.from_json(item) for item in payload]
        except ValueError as exc:
            logger.error(f"list_all: malformed directory response: {exc}")
            return Outcome.failure(FailureKind.UPSTREAM_REJECTED, f"Malformed directory response: {exc}")
        logger.info(f"Confirm {len(records)} records from directory")
        return Outcome.success(records)

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────

    def create(self, candidate: DirectoryRecord) -> Outcome[DirectoryRecord]:
        """Validate ``candidate`` and create it; the directory assigns the id.

        Validation failures return before any upstream call.
        """
        logger.info(f"Request create record for {candidate.last_name} {candidate.first_name}")
        error = validate_for_creation(candidate, today=self._clock())
        if error:
            logger.error(f"create: {error.message}")
            return Outcome.failure(FailureKind.VALIDATION_FAILED, error.message, field=error.field)

        payload = replace(candidate, id=None).to_json()
        outcome = self._send("POST", "", "create", FailureKind.UPSTREAM_REJECTED, json=payload)
        outcome = self._decode_record(outcome, "create")
        if outcome.ok:
            logger.info(f"Completed create record {outcome.value.id}")
        return outcome

    def update(self, record_id: int, request: UpdateRequest) -> Outcome[DirectoryRecord]:
        """Merge ``request`` over the live record and write the result.

        Always two round trips: a read of the current record, then a write.
        There is no version check between them; concurrent updates to the
        same id resolve as last writer wins.
        """
        invalid = _check_id(record_id)
        if invalid:
            return invalid
        logger.info(f"Request update record {record_id}")
        request = request.with_id(record_id)

        current = self.get_by_id(record_id)
        if not current.ok:
            return current

        merged = merge_update(current.value, request, today=self._clock())
        outcome = self._send(
            "PUT", "", f"update({record_id})", FailureKind.UPSTREAM_REJECTED, json=merged.to_json()
        )
        outcome = self._decode_record(outcome, f"update({record_id})")
        if outcome.ok:
            logger.info(f"Completed update record {record_id}")
        return outcome

    def update_role(self, record_id: int, role: Role) -> Outcome[DirectoryRecord]:
        """Change the role of a record."""
        invalid = _check_id(record_id)
        if invalid:
            return invalid
        try:
            role = Role.parse(role)
        except ValueError as exc:
            return Outcome.failure(FailureKind.VALIDATION_FAILED, str(exc), field="role")
        logger.info(f"Request role change of record {record_id} to {role.value}")
        outcome = self._send(
            "PUT",
            f"/{record_id}/change/{role.value}",
            f"update_role({record_id})",
            FailureKind.UPSTREAM_REJECTED,
        )
        outcome = self._decode_record(outcome, f"update_role({record_id})")
        if outcome.ok:
            logger.info(f"Confirm role change of record {record_id}")
        return outcome

    def remove(self, record_id: int) -> Outcome[str]:
        """Delete a record; the directory's confirmation text is the result."""
        invalid = _check_id(record_id)
        if invalid:
            return invalid
        logger.info(f"Request remove record {record_id}")
        outcome = self._send("DELETE", f"/{record_id}", f"remove({record_id})", FailureKind.UPSTREAM_REJECTED)
        if not outcome.ok:
            return outcome
        logger.info(f"Confirm remove record {record_id}")
        return Outcome.success(outcome.value.text)

    # ─────────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────────

    def _send(
        self,
        method: str,
        path: str,
        action: str,
        rejected_kind: FailureKind,
        json: Optional[dict] = None,
    ) -> Outcome[requests.Response]:
        """Run one logical upstream call through the retry loop.

        Args:
            method: HTTP verb
            path: Path relative to the base URL
            action: Operation label for logs and error details
            rejected_kind: Failure kind reported for a 4xx response
            json: Optional JSON body

        Returns:
            Outcome holding the successful response, or the classified failure
        """
        url = f"{self._base_url}{path}"
        max_attempts = self._retry.max_attempts
        last_error = ""
        last_status: Optional[int] = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                self._sleep(self._retry.delay)
            try:
                resp = self._session.request(method, url, json=json, timeout=self._timeout)
            except requests.RequestException as exc:
                last_error = str(exc) or exc.__class__.__name__
                last_status = None
                logger.warning(f"{action}: attempt {attempt}/{max_attempts} failed: {last_error}")
                continue

            if resp.status_code >= 500:
                last_error = f"[{resp.status_code}] {method} {url}"
                last_status = resp.status_code
                logger.warning(f"{action}: attempt {attempt}/{max_attempts} failed: {last_error}")
                continue

            if resp.status_code >= 400:
                logger.error(f"{action}: directory rejected request [{resp.status_code}] {method} {url}")
                return Outcome.failure(
                    rejected_kind,
                    f"{action} rejected by directory [{resp.status_code}]",
                    status_code=resp.status_code,
                )

            return Outcome.success(resp)

        logger.error(f"{action}: directory unavailable after {max_attempts} attempts")
        return Outcome.failure(
            FailureKind.UPSTREAM_UNAVAILABLE,
            f"Directory unavailable after {max_attempts} attempts: {last_error}",
            status_code=last_status,
        )

    @staticmethod
    def _decode_record(outcome: Outcome, action: str) -> Outcome[DirectoryRecord]:
        if not outcome.ok:
            return outcome
        try:
            return Outcome.success(DirectoryRecord.from_json(outcome.value.json()))
        except ValueError as exc:
            logger.error(f"{action}: malformed directory response: {exc}")
            return Outcome.failure(FailureKind.UPSTREAM_REJECTED, f"Malformed directory response: {exc}")


def _check_id(record_id) -> Optional[Outcome]:
    """Return a VALIDATION_FAILED outcome unless ``record_id`` is a positive int."""
    if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id <= 0:
        return Outcome.failure(
            FailureKind.VALIDATION_FAILED,
            f"id must be a positive integer, got {record_id!r}",
            field="id",
        )
    return None
