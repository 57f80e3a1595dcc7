"""Data models for jpreader."""

from jpreader.models.document import Document
from jpreader.models.history import CurrentHistory, History
from jpreader.models.history_token import HistoryToken
from jpreader.models.line import Line
from jpreader.models.line_token import LineToken
from jpreader.models.pos import PartOfSpeech, TokenCategory
from jpreader.models.state import Action, CurrentState, Position, State
from jpreader.models.token import Token

__all__ = [
    "Action",
    "CurrentHistory",
    "CurrentState",
    "Document",
    "History",
    "HistoryToken",
    "Line",
    "LineToken",
    "PartOfSpeech",
    "Position",
    "State",
    "Token",
    "TokenCategory",
]
