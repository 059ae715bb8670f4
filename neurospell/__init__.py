"""EEG-to-text acquisition pipeline."""

__version__ = "0.3.0"
