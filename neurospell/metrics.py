"""Prometheus collectors for the acquisition pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Summary

SAMPLES_RECEIVED = Counter(
    "eeg_samples_received_total",
    "EEG samples delivered by the device stream",
)

SEGMENTS_CLASSIFIED = Counter(
    "eeg_segments_classified_total",
    "Segments resolved to a symbol",
)

PIPELINE_RUNS = Counter(
    "pipeline_runs_total",
    "Completed acquisition cycles",
    labelnames=("flow", "status"),
)

PIPELINE_DURATION = Summary(
    "pipeline_processing_seconds",
    "Time spent segmenting, classifying and refining a recording",
)

START_SYMBOL_DETECTIONS = Counter(
    "start_symbol_detections_total",
    "Start symbol detections that triggered a recording",
)
