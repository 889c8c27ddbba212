"""
PlanIt API client — paginated application search + per-application detail.

Search degrades instead of failing: a transport error or non-success page
ends pagination and keeps whatever was already fetched. Rate limiting (429)
is recovered locally by waiting and re-requesting the same page.
"""
import logging
import math
import time
import requests
from typing import Any, Dict, Iterator, List, Optional

from planning_sync.config import (
    PLANIT_BASE_URL, PLANIT_PAGE_SIZE, PLANIT_MAX_RESULTS,
    PLANIT_PAGE_DELAY_SECONDS, PLANIT_RATE_LIMIT_DEFAULT_WAIT,
    PLANIT_MAX_RATE_LIMIT_RETRIES, PLANIT_MAX_RETRY_AFTER_SECONDS, PLANIT_TIMEOUT_SECONDS,
)
from planning_sync.services.results import LookupResult

logger = logging.getLogger('services.planit')


def parse_retry_after(value, default: float, maximum: float = PLANIT_MAX_RETRY_AFTER_SECONDS) -> float:
    """Seconds to wait from a Retry-After header (delta-seconds form only), capped at maximum."""
    if value is None:
        return default
    try:
        seconds = float(str(value).strip())
    except ValueError:
        return default
    if not math.isfinite(seconds) or seconds < 0:
        return default
    return min(seconds, maximum)


class PlanItClient:
    """
    Client for the public PlanIt planning-application API.

    Usage:
        planit = PlanItClient()
        candidates = planit.fetch_candidates(criteria, lookback_days=7)
        detail = planit.fetch_detail(candidates[0]['name'])
    """

    def __init__(
        self,
        base_url: str = PLANIT_BASE_URL,
        page_size: int = PLANIT_PAGE_SIZE,
        max_results: int = PLANIT_MAX_RESULTS,
        page_delay: float = PLANIT_PAGE_DELAY_SECONDS,
        rate_limit_wait: float = PLANIT_RATE_LIMIT_DEFAULT_WAIT,
        max_rate_limit_retries: int = PLANIT_MAX_RATE_LIMIT_RETRIES,
        timeout: float = PLANIT_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip('/')
        self.page_size = page_size
        self.max_results = max_results
        self.page_delay = page_delay
        self.rate_limit_wait = rate_limit_wait
        self.max_rate_limit_retries = max_rate_limit_retries
        self.timeout = timeout

    # ── Search ────────────────────────────────────────────────────────

    def search_params(self, criteria, lookback_days: int, page: int) -> Dict[str, Any]:
        """Query string for one search page."""
        params = {
            'pg_sz': self.page_size,
            'page': page,
            'postcode': criteria.postcode,
            'radius': _format_radius(criteria.radius_km),
            'recent': lookback_days,
            'compress': 'on',
        }
        if criteria.application_types:
            params['applic'] = ','.join(criteria.application_types)
        return params

    def iter_candidates(self, criteria, lookback_days: int) -> Iterator[Dict[str, Any]]:
        """
        Yield raw application records page by page.

        Stops when the reported total is reached, a page comes back empty, or
        max_results records have been yielded. Single-use: create a new
        iterator for every run.
        """
        url = f"{self.base_url}/api/applics/json"
        page = 1
        total = 0
        rate_limited = 0

        while True:
            params = self.search_params(criteria, lookback_days, page)
            try:
                response = requests.get(url, params=params, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                logger.warning("Page %d request failed, keeping %d records: %s", page, total, e)
                return

            if response.status_code == 429:
                rate_limited += 1
                if rate_limited > self.max_rate_limit_retries:
                    logger.warning("Page %d still rate limited after %d retries, keeping %d records",
                                   page, self.max_rate_limit_retries, total)
                    return
                wait = parse_retry_after(response.headers.get('Retry-After'), self.rate_limit_wait)
                logger.info("Rate limited on page %d, retrying in %.1fs", page, wait)
                time.sleep(wait)
                continue
            rate_limited = 0

            if not response.ok:
                logger.warning("Page %d returned HTTP %d, keeping %d records: %s",
                               page, response.status_code, total, response.text[:200])
                return

            try:
                data = response.json()
            except ValueError:
                logger.warning("Page %d returned invalid JSON, keeping %d records", page, total)
                return
            if not isinstance(data, dict):
                logger.warning("Page %d returned unexpected payload, keeping %d records", page, total)
                return

            records = data.get('records') or []
            if not records:
                return

            batch = records[:self.max_results - total]
            for record in batch:
                yield record
            total += len(batch)

            count = _as_int(data.get('count'))
            reached = _as_int(data.get('to'))
            if reached is None:
                reached = total

            if count is not None and reached >= count:
                return
            if total >= self.max_results:
                logger.warning("Hit the %d record cap for postcode %s", self.max_results, criteria.postcode)
                return

            page += 1
            time.sleep(self.page_delay)

    def fetch_candidates(self, criteria, lookback_days: int) -> List[Dict[str, Any]]:
        """Fetch every candidate for the criteria within the lookback window."""
        candidates = list(self.iter_candidates(criteria, lookback_days))
        logger.info("Fetched %d applications near %s (last %d days)",
                    len(candidates), criteria.postcode, lookback_days)
        return candidates

    # ── Detail ────────────────────────────────────────────────────────

    def fetch_detail(self, candidate_id: Optional[str]) -> LookupResult:
        """Best-effort fetch of one application's full record (agent details)."""
        if not candidate_id:
            return LookupResult.miss()

        url = f"{self.base_url}/planapplic/{candidate_id}/json"
        try:
            response = requests.get(url, params={'compress': 'on'}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.debug("Detail request for %s failed: %s", candidate_id, e)
            return LookupResult.failed(e)

        if response.status_code == 404:
            return LookupResult.miss()
        if not response.ok:
            return LookupResult.failed(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            return LookupResult.failed(e)
        if not isinstance(data, dict) or not data:
            return LookupResult.miss()
        return LookupResult.ok(data)


# ── Private helpers ──────────────────────────────────────────────────────────

def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _format_radius(radius):
    """5.0 → '5', 2.5 → '2.5'."""
    if radius is None:
        return ''
    radius = float(radius)
    return str(int(radius)) if radius.is_integer() else str(radius)
