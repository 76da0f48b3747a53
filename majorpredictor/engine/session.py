"""One page session: a parsed bracket page plus the engine that predicts it."""

from typing import List, Optional
import logging

from bs4 import BeautifulSoup

from majorpredictor.config import Config
from majorpredictor.constants import SETTING_COMPLETION_API_KEY
from majorpredictor.engine.orchestrator import PredictionEngine
from majorpredictor.exceptions import ConfigurationError
from majorpredictor.extraction.extractor import PageExtractor
from majorpredictor.extraction.rules import ExtractionRules
from majorpredictor.ops.metrics import MetricsRecorder
from majorpredictor.prediction.service import PredictionService
from majorpredictor.presentation.badges import HtmlBadgeRenderer
from majorpredictor.presentation.sink import CompositeSink, LoggingSink, PresentationSink
from majorpredictor.schema import (
    PASS_ERROR,
    MatchDescriptor,
    PassStatus,
    PassSummary,
    PredictionRequest,
    PredictionResult,
)
from majorpredictor.storage.log_store import PredictionLogStore
from majorpredictor.storage.settings_store import Settings

logger = logging.getLogger(__name__)


class PredictionSession:
    """
    Holds everything one page needs between passes.

    The engine, its cache and the renderer are created here and passed
    down; a new page means a new session.
    """

    def __init__(
        self,
        document: BeautifulSoup,
        settings: Settings,
        service: PredictionService,
        extractor: Optional[PageExtractor] = None,
        log_store: Optional[PredictionLogStore] = None,
        metrics: Optional[MetricsRecorder] = None,
        extra_sinks: Optional[List[PresentationSink]] = None,
    ):
        self.document = document
        self.settings = settings
        self.service = service
        self.extractor = extractor or PageExtractor()
        self.renderer = HtmlBadgeRenderer(document, show_confidence=settings.show_confidence)
        sinks: List[PresentationSink] = [self.renderer, LoggingSink()]
        sinks.extend(extra_sinks or [])
        self.sink = CompositeSink(sinks)
        self.engine = PredictionEngine(self.sink, log_store=log_store, metrics=metrics)
        self.descriptors: List[MatchDescriptor] = []

    @classmethod
    def from_config(
        cls,
        document: BeautifulSoup,
        settings: Settings,
        config: Config,
        service: Optional[PredictionService] = None,
        metrics: Optional[MetricsRecorder] = None,
    ) -> "PredictionSession":
        return cls(
            document,
            settings,
            service or PredictionService.from_config(config),
            extractor=PageExtractor(ExtractionRules.from_config(config)),
            log_store=PredictionLogStore(config.data_dir),
            metrics=metrics,
        )

    def scan(self) -> List[MatchDescriptor]:
        """Re-read the page and register any matchups with the renderer."""
        self.sink.on_pass_status(PassStatus.scanning())
        self.descriptors = self.extractor.scan(self.document)
        self.renderer.attach(self.descriptors, as_cards=self.extractor.used_text_fallback)
        logger.info(f"Found {len(self.descriptors)} matches on page")
        return self.descriptors

    async def predict_match(self, descriptor: MatchDescriptor) -> PredictionResult:
        return await self.service.predict(PredictionRequest.from_descriptor(descriptor), self.settings)

    async def predict_next_round(self) -> PassSummary:
        """Scan the page and predict the earliest round that still needs it."""
        if not self.settings.completion_api_key:
            error = ConfigurationError(SETTING_COMPLETION_API_KEY, "API key not configured")
            self.sink.on_pass_status(PassStatus.error(str(error)))
            raise error

        if self.engine.is_running:
            return await self.engine.run_prediction_pass(self.descriptors, self.predict_match)

        descriptors = self.scan()
        if not descriptors:
            self.sink.on_pass_status(PassStatus.error("No matches found on this page"))
            return PassSummary(status=PASS_ERROR)
        return await self.engine.run_prediction_pass(descriptors, self.predict_match)

    @property
    def cache(self):
        return self.engine.cache
