"""User preferences for jpreader, stored with :class:`QSettings`."""

from __future__ import annotations

from pathlib import Path
from typing import Final, cast

from PySide6.QtCore import QSettings

from jpreader.services.statistics import SortKey, TokenFilter


class Settings:
    """
    Typed access to the jpreader preferences.

    Keyword Args:
        qsettings: The backing :class:`QSettings`. If None, the native
            per-user store for jpreader is used.

    """

    #: The organization name used for the native settings store.
    ORGANIZATION: Final[str] = "jpreader"
    #: The application name used for the native settings store.
    APPLICATION: Final[str] = "jpreader"

    #: Override for the database path.
    DB_PATH_KEY: Final[str] = "reader/db_path"
    #: Whether line segmentation is memoized.
    CACHE_SEGMENTATION_KEY: Final[str] = "reader/cache_segmentation"
    #: The sort key of the statistics token list.
    STATISTICS_SORT_KEY: Final[str] = "statistics/sort"
    #: The filter of the statistics token list.
    STATISTICS_FILTER_KEY: Final[str] = "statistics/filter"
    #: Whether the statistics token list is sorted in descending order.
    STATISTICS_REVERSE_KEY: Final[str] = "statistics/reverse"

    def __init__(self, qsettings: QSettings | None = None) -> None:
        #: The backing settings store.
        self.settings = (
            qsettings
            if qsettings is not None
            else QSettings(self.ORGANIZATION, self.APPLICATION)
        )

    @property
    def db_path(self) -> Path | None:
        """
        The database path override, or None to use the default location.
        """
        value = cast("str", self.settings.value(self.DB_PATH_KEY, "", type=str))
        return Path(value) if value else None

    @db_path.setter
    def db_path(self, value: Path | None) -> None:
        if value is None:
            self.settings.remove(self.DB_PATH_KEY)
        else:
            self.settings.setValue(self.DB_PATH_KEY, str(value))

    @property
    def cache_segmentation(self) -> bool:
        """
        Whether the navigator memoizes the segmentation of each line.
        """
        return cast(
            "bool",
            self.settings.value(self.CACHE_SEGMENTATION_KEY, True, type=bool),
        )

    @cache_segmentation.setter
    def cache_segmentation(self, value: bool) -> None:
        self.settings.setValue(self.CACHE_SEGMENTATION_KEY, value)

    @property
    def statistics_sort(self) -> SortKey:
        """
        The sort key of the statistics token list.  Unknown stored values
        fall back to :attr:`SortKey.TOTAL`.
        """
        value = cast(
            "str",
            self.settings.value(self.STATISTICS_SORT_KEY, SortKey.TOTAL.value, type=str),
        )
        try:
            return SortKey(value)
        except ValueError:
            return SortKey.TOTAL

    @statistics_sort.setter
    def statistics_sort(self, value: SortKey) -> None:
        self.settings.setValue(self.STATISTICS_SORT_KEY, value.value)

    @property
    def statistics_filter(self) -> TokenFilter:
        """
        The filter of the statistics token list.  Unknown stored values
        fall back to :attr:`TokenFilter.ALL`.
        """
        value = cast(
            "str",
            self.settings.value(
                self.STATISTICS_FILTER_KEY, TokenFilter.ALL.value, type=str
            ),
        )
        try:
            return TokenFilter(value)
        except ValueError:
            return TokenFilter.ALL

    @statistics_filter.setter
    def statistics_filter(self, value: TokenFilter) -> None:
        self.settings.setValue(self.STATISTICS_FILTER_KEY, value.value)

    @property
    def statistics_reverse(self) -> bool:
        """
        Whether the statistics token list is sorted in descending order.
        """
        return cast(
            "bool",
            self.settings.value(self.STATISTICS_REVERSE_KEY, True, type=bool),
        )

    @statistics_reverse.setter
    def statistics_reverse(self, value: bool) -> None:
        self.settings.setValue(self.STATISTICS_REVERSE_KEY, value)

    def sync(self) -> None:
        """Write any pending changes to permanent storage."""
        self.settings.sync()
