"""Streaming package for the base layer.

Exposes the frame parser, the frame union and interpreter, the progress
estimator and session metrics under a single namespace.
"""

from .frame_parser import FrameParser, DATA_PREFIX
from .stream_frames import (
    ChunkFrame,
    CompleteFrame,
    ErrorFrame,
    StreamFrame,
    UnrecognizedFrame,
    interpret_frame,
)
from .progress import ProgressEstimator, estimate_progress
from .stream_metrics import SessionMetrics

__all__ = [
    "FrameParser",
    "DATA_PREFIX",
    "ChunkFrame",
    "CompleteFrame",
    "ErrorFrame",
    "StreamFrame",
    "UnrecognizedFrame",
    "interpret_frame",
    "ProgressEstimator",
    "estimate_progress",
    "SessionMetrics",
]
