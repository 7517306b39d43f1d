"""
Structural event pipeline: the handler contract and its implementations.
"""
from .handler import CodeHandler, ErrorListener, JavadocEntry
from .model_builder import HandlerState, ModelBuilderHandler, Scope
from .statistics import ParseStatistics, StatisticsHandler
from .events import AnyEvent, Event, EventLog, RecordingHandler, replay

__all__ = [
    "CodeHandler",
    "ErrorListener",
    "JavadocEntry",
    "HandlerState",
    "ModelBuilderHandler",
    "Scope",
    "ParseStatistics",
    "StatisticsHandler",
    "AnyEvent",
    "Event",
    "EventLog",
    "RecordingHandler",
    "replay",
]
