"""Google Trends integration using the pytrends library."""

import logging
import time
from typing import Optional

from pytrends.request import TrendReq

logger = logging.getLogger(__name__)

# pytrends compares at most five terms per payload.
BATCH_SIZE = 5


class GoogleTrendsClient:
    """Client for Google Trends relative interest via pytrends.

    Usage::

        trends = GoogleTrendsClient(geo="US")
        interest = trends.get_average_interest(["seo tools", "seo software"])
    """

    def __init__(
        self,
        hl: str = "en-US",
        tz: int = 360,
        geo: str = "",
        timeframe: str = "today 12-m",
        timeout: tuple[int, int] = (10, 30),
        retries: int = 3,
        backoff_factor: float = 1.5,
        requests_per_minute: int = 10,
    ):
        self._hl = hl
        self._tz = tz
        self._geo = geo
        self._timeframe = timeframe
        self._timeout = timeout
        self._retries = retries
        self._backoff_factor = backoff_factor
        self._rpm = requests_per_minute
        self._request_timestamps: list[float] = []

    def _get_pytrends(self) -> TrendReq:
        """Create a fresh TrendReq session."""
        return TrendReq(
            hl=self._hl,
            tz=self._tz,
            timeout=self._timeout,
            retries=self._retries,
            backoff_factor=self._backoff_factor,
        )

    def _rate_limit_sync(self) -> None:
        """Simple synchronous rate limiter."""
        now = time.monotonic()
        self._request_timestamps = [
            t for t in self._request_timestamps if now - t < 60.0
        ]
        if len(self._request_timestamps) >= self._rpm:
            wait = 60.0 - (now - self._request_timestamps[0])
            if wait > 0:
                logger.debug("Google Trends rate limit: sleeping %.1fs", wait)
                time.sleep(wait)
        self._request_timestamps.append(time.monotonic())

    def get_average_interest(
        self,
        keywords: list[str],
        timeframe: Optional[str] = None,
        geo: Optional[str] = None,
    ) -> dict[str, float]:
        """Mean search interest (0-100) per keyword over the timeframe.

        Keywords are queried in batches of five.  Keywords absent from a
        successful response report zero interest; a failed request is
        logged and re-raised.
        """
        timeframe = timeframe or self._timeframe
        geo = geo if geo is not None else self._geo
        result: dict[str, float] = {}

        for i in range(0, len(keywords), BATCH_SIZE):
            batch = keywords[i : i + BATCH_SIZE]
            try:
                self._rate_limit_sync()
                pt = self._get_pytrends()
                pt.build_payload(batch, timeframe=timeframe, geo=geo)
                df = pt.interest_over_time()
            except Exception as exc:
                logger.warning("Trends fetch failed for batch %s: %s", batch, exc)
                raise

            for kw in batch:
                if df.empty or kw not in df.columns:
                    result[kw] = 0.0
                else:
                    result[kw] = float(df[kw].mean())

        logger.info("Trends average interest fetched for %d keywords", len(result))
        return result
