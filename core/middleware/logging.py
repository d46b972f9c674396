"""
Request logging and request statistics.

StructuredLoggingMiddleware writes one JSON event when a request arrives and
one when it finishes, with credentials and email addresses masked. The same
middleware feeds RequestStats, which backs the systemLoad block of the
analytics dashboard.
"""

import json
import logging
import re
import time
import traceback
import uuid
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


# Field names whose values are never written to logs
SENSITIVE_FIELD_PATTERNS = [
    re.compile(r'pass(word|wd)', re.IGNORECASE),
    re.compile(r'token', re.IGNORECASE),
    re.compile(r'api[_-]?key', re.IGNORECASE),
    re.compile(r'secret', re.IGNORECASE),
    re.compile(r'authorization', re.IGNORECASE),
    re.compile(r'cookie', re.IGNORECASE),
]

# Candidate emails are the only PII that shows up in free text here
EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')

# Probes hit these every few seconds
UNLOGGED_PATHS = ('/health', '/ready')

# LLM round trips make multi-second requests normal
SLOW_REQUEST_MS = 15000
MODERATE_REQUEST_MS = 3000


def is_sensitive_field(field_name: str) -> bool:
    return any(pattern.search(field_name) for pattern in SENSITIVE_FIELD_PATTERNS)


def mask_sensitive_data(data: Any, depth: int = 0, max_depth: int = 10) -> Any:
    """
    Copy a JSON-like structure with secrets redacted and emails replaced.

    Args:
        data: Dicts, lists and scalars as decoded from JSON
        depth: Current nesting level
        max_depth: Nesting level past which values are dropped
    """
    if depth > max_depth:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(data, dict):
        return {
            key: "[REDACTED]" if is_sensitive_field(str(key))
            else mask_sensitive_data(value, depth + 1, max_depth)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive_data(item, depth + 1, max_depth) for item in data]
    if isinstance(data, str):
        return EMAIL_PATTERN.sub('[EMAIL]', data)
    return data


def mask_headers(headers: dict) -> dict:
    """Redact credential headers; Authorization keeps its scheme."""
    masked = {}
    for key, value in headers.items():
        if not is_sensitive_field(key):
            masked[key] = value
            continue
        scheme, _, credential = str(value).partition(' ')
        if key.lower() == 'authorization' and credential:
            masked[key] = f"{scheme} [REDACTED]"
        else:
            masked[key] = "[REDACTED]"
    return masked


def should_log_request(path: str) -> bool:
    return not path.startswith(UNLOGGED_PATHS)


def performance_label(duration_ms: float) -> str:
    if duration_ms > SLOW_REQUEST_MS:
        return 'slow'
    if duration_ms > MODERATE_REQUEST_MS:
        return 'moderate'
    return 'fast'


@dataclass
class RequestStats:
    """
    Process-wide request counters.

    Every request through StructuredLoggingMiddleware is counted, including
    the health probes it does not log. Only 5xx responses count as errors.
    """

    total_requests: int = 0
    error_requests: int = 0
    total_duration_ms: float = 0.0
    in_flight: int = 0
    peak_concurrency: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def request_started(self) -> None:
        with self._lock:
            self.in_flight += 1
            self.peak_concurrency = max(self.peak_concurrency, self.in_flight)

    def request_finished(self, duration_ms: float, status_code: int) -> None:
        with self._lock:
            self.in_flight = max(0, self.in_flight - 1)
            self.total_requests += 1
            self.total_duration_ms += duration_ms
            if status_code >= 500:
                self.error_requests += 1

    def snapshot(self) -> dict[str, float]:
        """Mean latency in ms, error rate as a 0-1 fraction, and peak concurrency."""
        with self._lock:
            if self.total_requests == 0:
                return {"averageResponseTime": 0.0, "errorRate": 0.0, "peakConcurrency": 0}
            return {
                "averageResponseTime": round(self.total_duration_ms / self.total_requests, 2),
                "errorRate": round(self.error_requests / self.total_requests, 4),
                "peakConcurrency": self.peak_concurrency,
            }

    def reset(self) -> None:
        with self._lock:
            self.total_requests = 0
            self.error_requests = 0
            self.total_duration_ms = 0.0
            self.in_flight = 0
            self.peak_concurrency = 0


request_stats = RequestStats()


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log request_started / request_completed events and count requests.

    The request id is taken from the x-request-id header or generated, and
    echoed back on the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        max_body_size: int = 1024,
        stats: RequestStats = request_stats,
    ):
        """
        Args:
            app: The ASGI application
            log_request_body: Add the masked JSON body of POST/PUT/PATCH requests
            max_body_size: Bodies larger than this are logged as their size only
            stats: Counters updated for every request
        """
        super().__init__(app)
        self.log_request_body = log_request_body
        self.max_body_size = max_body_size
        self.stats = stats

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
        request.state.request_id = request_id
        path = request.url.path
        log_this = should_log_request(path)

        started = time.perf_counter()
        self.stats.request_started()

        if log_this:
            event = {
                'event': 'request_started',
                'request_id': request_id,
                'method': request.method,
                'path': path,
                'query_params': mask_sensitive_data(dict(request.query_params)),
                'user_agent': request.headers.get('user-agent', 'unknown'),
                'headers': mask_headers(dict(request.headers)),
            }
            if self.log_request_body and request.method in ('POST', 'PUT', 'PATCH'):
                body = await self._read_body(request)
                if body:
                    event['body'] = mask_sensitive_data(body)
            logger.info(json.dumps(event))

        response = None
        error = None
        try:
            response = await call_next(request)
        except Exception as exc:
            error = {'type': type(exc).__name__}
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            status_code = response.status_code if response is not None else 500
            self.stats.request_finished(duration_ms, status_code)

            if log_this:
                event = {
                    'event': 'request_completed',
                    'request_id': request_id,
                    'method': request.method,
                    'path': path,
                    'status_code': status_code,
                    'duration_ms': round(duration_ms, 2),
                    'performance': performance_label(duration_ms),
                }
                if error:
                    event['error'] = error

                level = logging.ERROR if status_code >= 500 else (
                    logging.WARNING if status_code >= 400 else logging.INFO
                )
                logger.log(level, json.dumps(event))

        response.headers['x-request-id'] = request_id
        return response

    async def _read_body(self, request: Request) -> Any:
        """JSON body for logging; audio uploads and other binary bodies are described, not read."""
        content_type = request.headers.get('content-type', '')
        if 'application/json' not in content_type:
            return {'_content_type': content_type}

        body = await request.body()
        if len(body) > self.max_body_size:
            return {'_truncated': True, '_size': len(body)}
        try:
            return json.loads(body)
        except ValueError as e:
            logger.debug(f"Request body is not valid JSON: {e}")
            return None


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        request_id = getattr(record, 'request_id', None)
        if request_id:
            entry['request_id'] = request_id
        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(exc_type, exc_value, exc_tb),
            }
        return json.dumps(entry)


def setup_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Install a single console handler on the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        json_logs: JSON lines when true, plain text otherwise
    """
    level = getattr(logging, log_level.upper())

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        JSONFormatter() if json_logs
        else logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    for noisy in ('uvicorn.access', 'sqlalchemy.engine', 'httpx', 'google_genai'):
        logging.getLogger(noisy).setLevel(logging.WARNING)
