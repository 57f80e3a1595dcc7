"""Services package initialization."""

from jpreader.services.importer import DocumentImporter
from jpreader.services.navigator import Navigator
from jpreader.services.segmenter import Word, is_legal, segment, segment_line
from jpreader.services.statistics import (
    SortKey,
    Statistics,
    StatisticsExporter,
    StatisticsView,
    TokenFilter,
    TokenInfo,
)
from jpreader.services.store import ReaderStatus, ReaderStore, ReaderView
from jpreader.services.tokenizer import TokenData, Tokenizer

__all__ = [
    "DocumentImporter",
    "Navigator",
    "ReaderStatus",
    "ReaderStore",
    "ReaderView",
    "SortKey",
    "Statistics",
    "StatisticsExporter",
    "StatisticsView",
    "TokenData",
    "TokenFilter",
    "TokenInfo",
    "Tokenizer",
    "Word",
    "is_legal",
    "segment",
    "segment_line",
]
