"""HTTP client for the combined provinces endpoint."""

from __future__ import annotations

import logging
import time

import requests

from .config import RemoteConfig
from .geojson_io import ProvinceData

_LOGGER = logging.getLogger("peakmap.remote")

_RETRYABLE_HTTP_STATUS = {429, 500, 502, 503, 504}


class ProvinceDataClient:
    """Fetch `{boundaries, mountains}` from a provinces API with retries."""

    def __init__(self, cfg: RemoteConfig, session: requests.Session | None = None) -> None:
        self.cfg = cfg
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"User-Agent": cfg.user_agent})
        self._max_retries = max(int(cfg.max_retries), 0)
        self._retry_backoff_s = max(float(cfg.retry_backoff_s), 0.01)

    def fetch(self) -> ProvinceData:
        response = self._request_get(self.cfg.provinces_url)
        try:
            payload = response.json()
        except ValueError as exc:
            raise RuntimeError(f"Provinces endpoint returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise RuntimeError("Provinces endpoint must return a JSON object")
        data = ProvinceData.from_mapping(payload)
        _LOGGER.info(
            "Fetched %d boundaries and %d mountains from %s",
            len(data.boundaries.get("features") or []),
            len(data.mountains.get("features") or []),
            self.cfg.provinces_url,
        )
        return data

    def _request_get(self, url: str) -> requests.Response:
        attempts = self._max_retries + 1
        for attempt in range(attempts):
            response = self._session.get(url, timeout=self.cfg.request_timeout_s)
            if response.status_code not in _RETRYABLE_HTTP_STATUS:
                response.raise_for_status()
                return response
            if attempt >= self._max_retries:
                response.raise_for_status()
            delay_s = self._compute_retry_delay_s(response=response, attempt=attempt)
            _LOGGER.warning(
                "Retryable response %s for %s; retrying in %.1fs (%d/%d)",
                response.status_code,
                url,
                delay_s,
                attempt + 1,
                self._max_retries,
            )
            response.close()
            time.sleep(delay_s)
        raise RuntimeError("Unreachable retry loop in provinces client")

    def _compute_retry_delay_s(self, *, response: requests.Response, attempt: int) -> float:
        retry_after_s = _parse_retry_after_seconds(response.headers.get("Retry-After"))
        exponential_s = self._retry_backoff_s * (2**attempt)
        return min(max(exponential_s, retry_after_s), 60.0)


def _parse_retry_after_seconds(raw: str | None) -> float:
    if raw is None:
        return 0.0
    value = raw.strip()
    if not value:
        return 0.0
    try:
        parsed = float(value)
    except ValueError:
        return 0.0
    return max(parsed, 0.0)
