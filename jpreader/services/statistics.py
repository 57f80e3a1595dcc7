"""Statistics view: read-only reporting over the vocabulary ledger."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jpreader.exc import DoesNotExist
from jpreader.models.history import History
from jpreader.models.history_token import HistoryToken
from jpreader.utils import percent, to_utc_iso

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from sqlalchemy.orm import Session

    from jpreader.models.pos import PartOfSpeech
    from jpreader.settings import Settings

logger = logging.getLogger(__name__)


class SortKey(StrEnum):
    """How the token breakdown is ordered."""

    TOTAL = "total"
    UNKNOWN = "unknown"
    PERCENT = "percent"


class TokenFilter(StrEnum):
    """Which tokens the breakdown shows."""

    ALL = "all"
    #: Tokens never marked unknown.
    LEARNED = "learned"
    #: Tokens marked unknown at least once.
    UNLEARNED = "unlearned"


@dataclass(frozen=True)
class TokenInfo:
    """The ledger counters of one dictionary entry in one history."""

    #: The dictionary form.
    lemma: str
    #: The part of speech.
    part_of_speech: PartOfSpeech
    #: The number of times the token was seen.
    total_seen: int
    #: The number of times the token was marked unknown.
    total_unknown: int

    @property
    def total_known(self) -> int:
        return self.total_seen - self.total_unknown

    @property
    def percent_known(self) -> int:
        """
        Percentage of sightings in which the token was not marked unknown.
        """
        return percent(self.total_known, self.total_seen)

    @property
    def is_learned(self) -> bool:
        return self.total_unknown == 0

    def to_json(self) -> dict[str, Any]:
        return {
            "lemma": self.lemma,
            "part_of_speech": self.part_of_speech.value,
            "total_seen": self.total_seen,
            "total_unknown": self.total_unknown,
            "percent_known": self.percent_known,
        }


@dataclass
class Statistics:
    """Aggregated ledger of one history."""

    #: The history ID.
    history_id: int
    #: The name of the document read.
    document_name: str
    #: When the history started.
    start_date: datetime
    #: When the history was ended, if it was.
    end_date: datetime | None
    #: Sum of ``total_seen`` over every token of the history.
    total_seen: int
    #: Sum of ``total_unknown`` over every token of the history.
    total_unknown: int
    #: The per-token breakdown, filtered and sorted.
    tokens: list[TokenInfo] = field(default_factory=list)

    @property
    def percent_known(self) -> int:
        return percent(self.total_seen - self.total_unknown, self.total_seen)

    def to_json(self) -> dict[str, Any]:
        """
        Serialize statistics to a JSON-compatible dictionary.

        Returns:
            Dictionary containing the statistics, with dates as UTC ISO strings

        """
        return {
            "document_name": self.document_name,
            "start_date": to_utc_iso(self.start_date),
            "end_date": to_utc_iso(self.end_date),
            "total_seen": self.total_seen,
            "total_unknown": self.total_unknown,
            "percent_known": self.percent_known,
            "tokens": [token.to_json() for token in self.tokens],
        }


def filter_tokens(
    tokens: Iterable[TokenInfo], token_filter: TokenFilter
) -> list[TokenInfo]:
    """
    Keep the tokens selected by ``token_filter``.

    Args:
        tokens: The tokens to filter
        token_filter: The filter

    Returns:
        The selected tokens, in their original order

    """
    if token_filter is TokenFilter.LEARNED:
        return [token for token in tokens if token.is_learned]
    if token_filter is TokenFilter.UNLEARNED:
        return [token for token in tokens if not token.is_learned]
    return list(tokens)


def sort_tokens(
    tokens: Iterable[TokenInfo], sort: SortKey, reverse: bool = True
) -> list[TokenInfo]:
    """
    Sort tokens by one of their counters.  Ties keep their original order.

    Args:
        tokens: The tokens to sort
        sort: The counter to sort by

    Keyword Args:
        reverse: Sort in descending order

    Returns:
        The sorted tokens

    """
    if sort is SortKey.UNKNOWN:
        return sorted(tokens, key=lambda token: token.total_unknown, reverse=reverse)
    if sort is SortKey.PERCENT:
        return sorted(tokens, key=lambda token: token.percent_known, reverse=reverse)
    return sorted(tokens, key=lambda token: token.total_seen, reverse=reverse)


class StatisticsView:
    """
    Builds :class:`Statistics` for histories.

    When settings are given, the sort and filter preferences are read from
    and remembered in them.
    """

    def __init__(self, session: Session, settings: Settings | None = None) -> None:
        """
        Initialize the view.

        Args:
            session: SQLAlchemy session

        Keyword Args:
            settings: The user preferences

        """
        #: The SQLAlchemy session.
        self.session = session
        #: The user preferences.
        self.settings = settings

    @property
    def sort(self) -> SortKey:
        return self.settings.statistics_sort if self.settings else SortKey.TOTAL

    @property
    def token_filter(self) -> TokenFilter:
        return self.settings.statistics_filter if self.settings else TokenFilter.ALL

    @property
    def reverse(self) -> bool:
        return self.settings.statistics_reverse if self.settings else True

    def statistics(
        self,
        history_id: int,
        token_filter: TokenFilter | None = None,
        sort: SortKey | None = None,
        reverse: bool | None = None,
    ) -> Statistics:
        """
        Aggregate the ledger of a history.

        The totals always cover every token of the history; the filter only
        applies to the per-token breakdown.

        Args:
            history_id: History ID

        Keyword Args:
            token_filter: Which tokens to list; defaults to the preference
            sort: How to order the tokens; defaults to the preference
            reverse: Sort descending; defaults to the preference

        Raises:
            DoesNotExist: If the history does not exist

        Returns:
            The statistics of the history

        """
        history = History.get(self.session, history_id)
        if history is None:
            raise DoesNotExist("History", history_id)

        total_seen, total_unknown = HistoryToken.totals(self.session, history_id)
        tokens = [
            TokenInfo(
                lemma=row.token.lemma,
                part_of_speech=row.token.part_of_speech,
                total_seen=row.total_seen,
                total_unknown=row.total_unknown,
            )
            for row in HistoryToken.list(self.session, history_id)
        ]
        tokens = filter_tokens(
            tokens, token_filter if token_filter is not None else self.token_filter
        )
        tokens = sort_tokens(
            tokens,
            sort if sort is not None else self.sort,
            reverse=reverse if reverse is not None else self.reverse,
        )
        return Statistics(
            history_id=history.id,
            document_name=history.document.name,
            start_date=history.start_date,
            end_date=history.end_date,
            total_seen=total_seen,
            total_unknown=total_unknown,
            tokens=tokens,
        )

    def choose_sort(self, sort: SortKey) -> None:
        """
        Make ``sort`` the preferred order.  Choosing the current order again
        flips between ascending and descending.

        Args:
            sort: The chosen sort key

        """
        if self.settings is None:
            return
        if self.settings.statistics_sort is sort:
            self.settings.statistics_reverse = not self.settings.statistics_reverse
        self.settings.statistics_sort = sort

    def choose_filter(self, token_filter: TokenFilter) -> None:
        """
        Make ``token_filter`` the preferred filter.
        """
        if self.settings is not None:
            self.settings.statistics_filter = token_filter


class StatisticsExporter:
    """Exports history statistics to JSON format."""

    def __init__(self, session: Session) -> None:
        """
        Initialize exporter.

        Args:
            session: SQLAlchemy session

        """
        self.session = session
        self.view = StatisticsView(session)

    def export_json(self, history_id: int, filename: str | Path) -> Path:
        """
        Export the full statistics of a history as JSON to a file.

        Every token is exported, sorted by ``total_seen`` descending.

        Args:
            history_id: History ID to export
            filename: Filename to export to; ``.json`` is appended if missing

        Raises:
            DoesNotExist: If the history does not exist
            ValueError: If the file cannot be written

        Returns:
            The path written

        """
        path = Path(filename)
        if path.suffix != ".json":
            path = path.with_name(path.name + ".json")

        statistics = self.view.statistics(
            history_id, token_filter=TokenFilter.ALL, sort=SortKey.TOTAL, reverse=True
        )
        data = {"export_version": "1.0", "statistics": statistics.to_json()}

        try:
            with path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            msg = f"Failed to write export file:\n{e!s}"
            raise ValueError(msg) from e

        logger.info(f"Exported statistics of history {history_id} to {path}")
        return path
