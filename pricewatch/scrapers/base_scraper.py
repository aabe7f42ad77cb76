# pricewatch/scrapers/base_scraper.py

"""Scrape collaborator contract and the shared HTTP plumbing behind it."""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlparse

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from pricewatch.config.settings import Settings


class PriceFetcher(Protocol):
    """Anything that can fetch the current canonical price for a URL."""

    def fetch_price(self, url: str) -> str | None:
        """Return a canonical price, or ``None`` if none can be extracted."""
        ...


@dataclass
class HostState:
    """Adaptive delay and circuit breaker state for one host."""

    current_delay: float
    consecutive_failures: int = 0
    circuit_open: bool = False
    circuit_opened_at: float = 0.0


class BaseScraper(ABC):
    """Abstract base class for product page scrapers.

    Resilience state (delay escalation, circuit breaker) is tracked per
    host so one failing shop does not block URLs on other shops.  The
    curl_cffi session is per thread, so a single scraper can serve a
    concurrent update batch.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"pricewatch.scraper.{source_name}"
        )
        self.settings = Settings()
        self.selectors: dict[str, dict[str, str]] = self._load_selectors()
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        self._hosts: dict[str, HostState] = {}
        self._hosts_lock = threading.Lock()
        self._local = threading.local()

    def _load_selectors(self) -> dict[str, dict[str, str]]:
        """Load per-host CSS selectors from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        return all_selectors

    def selectors_for(self, host: str) -> dict[str, str]:
        """Return the selectors for *host*, falling back to ``default``."""
        default: dict[str, str] = self.selectors.get("default", {})
        return self.selectors.get(host.lower(), default)

    @property
    def session(self) -> curl_requests.Session:
        """The calling thread's browser-impersonating session."""
        session: curl_requests.Session | None = getattr(
            self._local, "session", None
        )
        if session is None:
            session = curl_requests.Session(
                impersonate=self.settings.IMPERSONATE_BROWSER
            )
            self._local.session = session
        return session

    @session.setter
    def session(self, value: curl_requests.Session) -> None:
        self._local.session = value

    def host_state(self, host: str) -> HostState:
        """Return (creating if needed) the resilience state for *host*."""
        with self._hosts_lock:
            state = self._hosts.get(host)
            if state is None:
                state = HostState(
                    current_delay=self.settings.REQUEST_DELAY
                )
                self._hosts[host] = state
            return state

    @staticmethod
    def _homepage(url: str) -> str:
        """Return ``scheme://host/`` for the Referer header."""
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}/"

    def _wait(self, state: HostState) -> None:
        """Sleep using the host's current (possibly escalated) delay."""
        time.sleep(state.current_delay)

    def _validate_response(
        self, resp: curl_requests.Response,
    ) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        text = resp.text
        if text.lstrip().startswith(("{", "[")):
            return True
        lower = text.lower()

        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Cloudflare challenge detected "
                    "(marker: '%s')",
                    self.source_name,
                    marker,
                )
                return False

        # Skip the keyword scan on pages with real content
        has_body_content = (
            "<body" in lower and len(text) > 5000
        )
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.source_name,
                        keyword,
                    )
                    return False
        return True

    def _check_circuit(self, host: str, state: HostState) -> bool:
        """Return True if the circuit breaker blocks this request.

        After CIRCUIT_BREAKER_COOLDOWN seconds the breaker enters
        a half-open state, allowing a single probe request through.
        """
        with self._hosts_lock:
            if not state.circuit_open:
                return False
            elapsed = time.time() - state.circuit_opened_at
            if elapsed < self.settings.CIRCUIT_BREAKER_COOLDOWN:
                return True
            state.circuit_open = False
        self.logger.info(
            "[%s] Circuit breaker half-open for %s after %.0fs",
            self.source_name,
            host,
            elapsed,
        )
        return False

    def _record_success(self, state: HostState) -> None:
        """Reset failure counters after a successful fetch."""
        with self._hosts_lock:
            state.consecutive_failures = 0
            state.circuit_open = False
            state.circuit_opened_at = 0.0
            state.current_delay = self.settings.REQUEST_DELAY

    def _record_failure(self, host: str, state: HostState) -> None:
        """Track failure and open circuit breaker if needed."""
        with self._hosts_lock:
            state.consecutive_failures += 1
            failures = state.consecutive_failures
            tripped = (
                not state.circuit_open
                and failures >= self.settings.CIRCUIT_BREAKER_THRESHOLD
            )
            if tripped:
                state.circuit_open = True
                state.circuit_opened_at = time.time()
        if tripped:
            self.logger.error(
                "[%s] Circuit breaker opened for %s after %d "
                "consecutive failures",
                self.source_name,
                host,
                failures,
            )

    def _escalate_delay(self, host: str, state: HostState) -> None:
        """Double the host's delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY
            * self.settings.MAX_DELAY_MULTIPLIER
        )
        with self._hosts_lock:
            state.current_delay = min(state.current_delay * 2, max_delay)
            delay = state.current_delay
        self.logger.warning(
            "[%s] Rate-limited by %s, delay escalated to %.1fs",
            self.source_name,
            host,
            delay,
        )

    def _fetch_get(
        self,
        url: str,
        headers: dict[str, str],
    ) -> curl_requests.Response | None:
        """GET with retries, adaptive delay, and circuit breaker."""
        host = urlparse(url).netloc
        state = self.host_state(host)
        if self._check_circuit(host, state):
            return None
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    url,
                    headers=headers,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    if not self._validate_response(resp):
                        self._escalate_delay(host, state)
                        time.sleep(state.current_delay)
                        continue
                    self._record_success(state)
                    return resp
                self.logger.warning(
                    "[%s] HTTP %d for %s on attempt %d",
                    self.source_name,
                    resp.status_code,
                    url,
                    attempt + 1,
                )
                if resp.status_code == 404:
                    break
                if resp.status_code in (429, 403):
                    self._escalate_delay(host, state)
                    time.sleep(state.current_delay)
            except Exception as exc:
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.source_name,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(state.current_delay * (attempt + 1))
        self._record_failure(host, state)
        return None

    def _get_page(self, url: str) -> BeautifulSoup | None:
        """Fetch a page, falling back to cloudscraper on failure."""
        host = urlparse(url).netloc
        state = self.host_state(host)
        if self._check_circuit(host, state):
            self.logger.info(
                "[%s] Circuit open for %s, skipping %s",
                self.source_name,
                host,
                url,
            )
            return None
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._homepage(url),
        }
        self._wait(state)

        # Primary: curl_cffi (browser-impersonating TLS)
        resp = self._fetch_get(url, headers)
        if resp:
            return BeautifulSoup(resp.text, "lxml")

        # Fallback: cloudscraper (JS challenge solver)
        self.logger.info(
            "[%s] curl_cffi exhausted for %s, falling back to cloudscraper",
            self.source_name,
            url,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback_resp: Any = scraper.get(
                url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if fallback_resp.status_code == 200:
                return BeautifulSoup(
                    str(fallback_resp.text), "lxml"
                )
        except Exception as e:
            self.logger.error(
                "[%s] cloudscraper fallback also failed: %s",
                self.source_name,
                e,
                exc_info=True,
            )

        return None

    @abstractmethod
    def fetch_price(self, url: str) -> str | None:
        """Fetch *url* and return its current canonical price."""
        ...
