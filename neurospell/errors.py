"""Exception types shared by the acquisition pipeline."""

from __future__ import annotations


class NeurospellError(Exception):
    pass


class ConnectivityError(NeurospellError):
    """The EEG device server is unreachable or the link was closed."""


class StreamProtocolError(NeurospellError):
    """The device server answered a handshake request with an error."""


class ClassificationUnavailable(NeurospellError):
    """No symbol model is loaded."""


class TrainingExhausted(NeurospellError):
    """No untrained letters remain to draw from."""


class PipelineFailure(NeurospellError):
    pass


class RefinementError(NeurospellError):
    pass


class InvalidTransition(NeurospellError):
    """An action was requested from a state that does not accept it."""


class AcquisitionBusy(NeurospellError):
    """Another flow already holds the acquisition window."""
