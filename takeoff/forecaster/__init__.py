"""Forecasting backend adapters: live Gemini streaming plus record/replay."""
from .base import ForecastOptions, Forecaster, ForecasterContext, StreamClient, StreamRequest
from .forecasters import StreamingForecaster, create_forecaster, create_stream_client
from .gemini import GeminiStreamClient
from .replay import RecordingStreamClient, ReplayStreamClient, load_tape, save_tape

__all__ = [
    "ForecastOptions",
    "Forecaster",
    "ForecasterContext",
    "GeminiStreamClient",
    "RecordingStreamClient",
    "ReplayStreamClient",
    "StreamClient",
    "StreamRequest",
    "StreamingForecaster",
    "create_forecaster",
    "create_stream_client",
    "load_tape",
    "save_tape",
]
