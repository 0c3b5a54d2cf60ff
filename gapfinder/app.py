"""Application wiring: configuration, store, estimator, and service."""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from gapfinder.database import DEFAULT_DATABASE_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yaml"
DEFAULT_DATABASE_FILE = "gapfinder.db"


@dataclass
class AnalysisSettings:
    """Tunables of the analysis pipeline (``analysis`` section of the config)."""
    estimator: str = "simulated"
    seed: Optional[int] = None
    long_tail_limit: int = 50
    max_recommendations: int = 10
    clamp_volume: bool = True
    deduplicate_keywords: bool = False
    click_through_rate: float = 0.10
    conversion_rate: float = 0.02
    average_order_value: float = 50.0

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "AnalysisSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data or {}) - known
        if unknown:
            logger.warning("Ignoring unknown analysis settings: %s", ", ".join(sorted(unknown)))
        return cls(**{k: v for k, v in (data or {}).items() if k in known})


class GapFinderApp:
    """Central application class that builds every collaborator from config.

    Usage::

        app = GapFinderApp()
        app.initialize()
        result = app.service.analyze_category_gaps(1, "editor")
    """

    def __init__(
        self,
        config_path: str = DEFAULT_CONFIG_PATH,
        env_path: str = ".env",
        database_url: Optional[str] = None,
    ):
        self._config_path = config_path
        self._env_path = env_path
        self._database_url = database_url
        self.config: dict[str, Any] = {}
        self.settings = AnalysisSettings()
        self._store = None
        self._service = None
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, seed: Optional[int] = None) -> None:
        """Load environment and configuration, open the database, build the service."""
        if self._initialized:
            return

        env_file = Path(self._env_path)
        if env_file.exists():
            load_dotenv(env_file)
            logger.info("Loaded environment from %s", self._env_path)

        self.config = self._load_config()
        self.settings = AnalysisSettings.from_dict(self.config.get("analysis"))
        if seed is not None:
            self.settings.seed = seed

        from gapfinder.store import SQLAlchemyAnalysisStore
        db_cfg = self.config.get("database", {}) or {}
        self._store = SQLAlchemyAnalysisStore.from_url(
            self._resolve_database_url(db_cfg), echo=bool(db_cfg.get("echo", False)),
        )
        self._service = self._build_service()
        self._initialized = True
        app_name = (self.config.get("app", {}) or {}).get("name", "GapFinder")
        logger.info("%s initialised (estimator=%s).", app_name, self.settings.estimator)

    def _load_config(self) -> dict[str, Any]:
        """Load the YAML configuration file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s -- using defaults.", self._config_path)
            return {}
        with open(config_file, "r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}
        logger.info("Configuration loaded from %s", self._config_path)
        return config

    def _resolve_database_url(self, db_cfg: dict[str, Any]) -> str:
        """Explicit argument, then DATABASE_URL, then ``database.url``,
        then a SQLite file inside ``app.data_dir``."""
        if self._database_url:
            return self._database_url
        url = os.getenv("DATABASE_URL") or db_cfg.get("url")
        if url:
            return url
        data_dir = (self.config.get("app", {}) or {}).get("data_dir")
        if not data_dir:
            return DEFAULT_DATABASE_URL
        return "sqlite:///" + str(Path(data_dir) / DEFAULT_DATABASE_FILE)

    def _build_estimator(self):
        from gapfinder.modules.gap_analysis import SimulatedMetricEstimator, TrendsMetricEstimator

        if self.settings.estimator == "simulated":
            return SimulatedMetricEstimator(seed=self.settings.seed)
        if self.settings.estimator == "trends":
            from gapfinder.integrations.google_trends import GoogleTrendsClient
            trends_cfg = self.config.get("trends", {}) or {}
            client = GoogleTrendsClient(
                geo=trends_cfg.get("geo", ""),
                timeframe=trends_cfg.get("timeframe", "today 12-m"),
                requests_per_minute=trends_cfg.get("requests_per_minute", 10),
            )
            return TrendsMetricEstimator(trends_client=client)
        raise ValueError(f"Unknown estimator: {self.settings.estimator!r}")

    def _build_service(self):
        from gapfinder.modules.gap_analysis import (
            ContentGapAnalysisService,
            GapAnalyzer,
            KeywordGenerator,
            RecommendationEngine,
        )

        s = self.settings
        return ContentGapAnalysisService(
            self._store,
            estimator=self._build_estimator(),
            keyword_generator=KeywordGenerator(
                long_tail_limit=s.long_tail_limit, deduplicate=s.deduplicate_keywords,
            ),
            analyzer=GapAnalyzer(
                clamp_volume=s.clamp_volume,
                click_through_rate=s.click_through_rate,
                conversion_rate=s.conversion_rate,
                average_order_value=s.average_order_value,
            ),
            recommendation_engine=RecommendationEngine(max_recommendations=s.max_recommendations),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def store(self):
        self._ensure_initialized()
        return self._store

    @property
    def service(self):
        self._ensure_initialized()
        return self._service

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Call initialize() before using the application.")
