"""Process-wide service container: built once at start-up, disposed at shutdown."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional

from .eeg.collector import Collector
from .eeg.segmenter import Segmenter
from .eeg.stream import StreamLink
from .orchestration.recording import RecordingOrchestrator
from .orchestration.training import TrainingOrchestrator
from .orchestration.watcher import StartSymbolWatcher
from .services.classifier import ClassifierFacade
from .services.refiner import TextRefiner
from .settings import AppSettings, get_settings
from .store.model_store import ModelStore

LOGGER = logging.getLogger("neurospell.context")


class AppContext:
    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        stream: Optional[StreamLink] = None,
        refiner: Optional[TextRefiner] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.config = self.settings.pipeline_config()
        self.stream = stream or StreamLink(
            self.settings.stream_url,
            client_id=self.settings.stream_client_id,
            client_secret=self.settings.stream_client_secret,
        )
        self.model_store = ModelStore(Path(self.settings.model_store_dir))
        self.collector = Collector(self.stream)
        self.segmenter = Segmenter.from_config(self.config)
        self.classifier = ClassifierFacade(
            self.config.alphabet,
            self.model_store,
            threshold=self.config.start_symbol_threshold,
            random_fallback=self.settings.classifier_random_fallback,
            rng=rng,
        )
        self.classifier.load_models()
        self.refiner = refiner or TextRefiner(self.settings)
        tick = self.settings.tick_seconds
        self.recording = RecordingOrchestrator(
            self.collector,
            self.segmenter,
            self.classifier,
            self.refiner,
            self.config,
            tick_seconds=tick,
        )
        self.training = TrainingOrchestrator(
            self.collector,
            self.segmenter,
            self.classifier,
            self.config,
            tick_seconds=tick,
            rng=rng,
        )
        self.watcher = StartSymbolWatcher(
            self.stream,
            self.classifier,
            self.recording,
            self.config.segment_length,
        )
        self.stream.errors.subscribe(self._log_stream_error)

    def _log_stream_error(self, message: str) -> None:
        LOGGER.warning("Stream error: %s", message)

    async def aclose(self) -> None:
        self.watcher.disable()
        self.recording.reset()
        self.training.reset()
        await self.stream.disconnect()
        await self.refiner.close()
        LOGGER.info("Context disposed")
