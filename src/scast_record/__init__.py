"""Screencast Recorder - capture side."""
from .recorder import Recorder, RecordingState, ScreencastSession

__all__ = ["Recorder", "RecordingState", "ScreencastSession"]
