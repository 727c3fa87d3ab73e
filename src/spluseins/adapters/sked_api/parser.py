"""Parser for sked timetable pages.

Sked renders a timetable either as a list (one table row per lecture) or as a
graphical week grid (one column per day, one row per time slot, lectures as
cells spanning several rows).
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from spluseins.adapters.sked_api.constants import (
    LIST_DATE_HEADERS,
    LIST_END_HEADERS,
    LIST_INFO_HEADERS,
    LIST_LECTURER_HEADERS,
    LIST_ORGANISER_HEADERS,
    LIST_ROOM_HEADERS,
    LIST_START_HEADERS,
    LIST_TITLE_HEADERS,
)
from spluseins.domain.models.errors import SkedParseError
from spluseins.domain.models.raw_lecture import RawLecture

if TYPE_CHECKING:
    from spluseins.domain.models.timetable_request import TimetableRequest

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{2,4})")
TIME_PATTERN = re.compile(r"(\d{1,2})[:.](\d{2})")

# Slot length of the graphical grid when the time column has a single label
DEFAULT_SLOT_MINUTES = 15


@dataclass(frozen=True)
class _ListColumns:
    """Column positions of a list-view table."""

    date: int
    start: int
    end: int
    title: int | None
    lecturer: int | None
    room: int | None
    info: int | None
    organiser: int | None


@dataclass(frozen=True)
class _GridCell:
    """An occupied cell of the graphical grid."""

    row: int
    column: int
    rowspan: int
    lines: list[str]


def parse_date(text: str) -> date | None:
    """Parse a 'dd.mm.yyyy' date, optionally surrounded by other text."""
    match = DATE_PATTERN.search(text)
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError as e:
        raise SkedParseError(f"Invalid date {match.group(0)!r}") from e


def parse_time(text: str) -> time | None:
    """Parse an 'HH:MM' time, optionally surrounded by other text."""
    match = TIME_PATTERN.search(text)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    try:
        return time(hour, minute)
    except ValueError as e:
        raise SkedParseError(f"Invalid time {match.group(0)!r}") from e


def _cell_text(cell: Tag) -> str:
    return cell.get_text(" ", strip=True)


def _cell_lines(cell: Tag) -> list[str]:
    return [line.strip() for line in cell.get_text("\n", strip=True).split("\n") if line.strip()]


def _span(cell: Tag, attribute: str) -> int:
    try:
        return max(1, int(str(cell.get(attribute, 1))))
    except ValueError:
        return 1


def _direct_rows(table: Tag) -> list[Tag]:
    """Rows of a table, excluding rows of nested tables."""
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def _row_cells(row: Tag) -> list[Tag]:
    return row.find_all(["td", "th"], recursive=False)


def _column(texts: list[str], index: int | None) -> str:
    if index is None or index >= len(texts):
        return ""
    return texts[index]


def _find_column(headers: list[str], candidates: tuple[str, ...]) -> int | None:
    for index, header in enumerate(headers):
        if header in candidates:
            return index
    return None


class SkedParser:
    """Turns sked HTML into lectures.

    Times on sked pages are local wall-clock times; they are made aware with
    the timezone passed in.
    """

    def __init__(self, tz: tzinfo) -> None:
        self._tz = tz

    def parse(self, html: str, timetable: "TimetableRequest") -> list[RawLecture]:
        """Parse a page in the view mode the timetable request selects."""
        if timetable.graphical:
            return self.parse_graphical(html, timetable.faculty)
        return self.parse_list(html)

    def _at(self, day: date, clock: time) -> datetime:
        return datetime.combine(day, clock).replace(tzinfo=self._tz)

    # List view

    def _list_columns(self, row: Tag) -> _ListColumns | None:
        headers = [_cell_text(cell).lower().rstrip(":") for cell in _row_cells(row)]
        date_column = _find_column(headers, LIST_DATE_HEADERS)
        start_column = _find_column(headers, LIST_START_HEADERS)
        end_column = _find_column(headers, LIST_END_HEADERS)
        if date_column is None or start_column is None or end_column is None:
            return None
        return _ListColumns(
            date=date_column,
            start=start_column,
            end=end_column,
            title=_find_column(headers, LIST_TITLE_HEADERS),
            lecturer=_find_column(headers, LIST_LECTURER_HEADERS),
            room=_find_column(headers, LIST_ROOM_HEADERS),
            info=_find_column(headers, LIST_INFO_HEADERS),
            organiser=_find_column(headers, LIST_ORGANISER_HEADERS),
        )

    def _parse_list_table(self, rows: list[Tag], columns: _ListColumns) -> list[RawLecture]:
        lectures: list[RawLecture] = []
        current_date: date | None = None

        for row in rows:
            texts = [_cell_text(cell) for cell in _row_cells(row)]
            if len(texts) <= max(columns.date, columns.start, columns.end):
                continue

            # Sked leaves the date empty for further lectures on the same day
            row_date = parse_date(texts[columns.date])
            if row_date is not None:
                current_date = row_date

            start = parse_time(texts[columns.start])
            end = parse_time(texts[columns.end])
            if start is None or end is None:
                continue
            if current_date is None:
                raise SkedParseError(f"Lecture at {texts[columns.start]} has no date")

            organiser = _column(texts, columns.organiser)
            lectures.append(
                RawLecture(
                    title=_column(texts, columns.title),
                    start=self._at(current_date, start),
                    end=self._at(current_date, end),
                    room=_column(texts, columns.room),
                    lecturer=_column(texts, columns.lecturer),
                    info=_column(texts, columns.info),
                    organiser_name=organiser,
                    organiser_shortname=organiser,
                )
            )

        return lectures

    def parse_list(self, html: str) -> list[RawLecture]:
        """Parse the list view of a sked timetable.

        Raises:
            SkedParseError: If no table with date and time columns is found.
        """
        soup = BeautifulSoup(html, "html.parser")
        lectures: list[RawLecture] = []
        found = False

        for table in soup.find_all("table"):
            rows = _direct_rows(table)
            for index, row in enumerate(rows):
                columns = self._list_columns(row)
                if columns is not None:
                    found = True
                    lectures.extend(self._parse_list_table(rows[index + 1 :], columns))
                    break

        if not found:
            raise SkedParseError("No sked list table found")
        logger.debug(f"Parsed {len(lectures)} lectures from list view")
        return lectures

    # Graphical view

    def _find_grid(self, soup: BeautifulSoup) -> tuple[list[date], list[Tag]]:
        """Locate the week grid and return its day columns and body rows."""
        for table in soup.find_all("table"):
            rows = _direct_rows(table)
            if not rows:
                continue
            header_cells = _row_cells(rows[0])
            days: list[date] = []
            for cell in header_cells[1:]:
                day = parse_date(_cell_text(cell))
                if day is None:
                    days = []
                    break
                # Parallel lectures on one day get extra columns under one header
                days.extend([day] * _span(cell, "colspan"))
            if days:
                return days, rows[1:]
        raise SkedParseError("No sked week grid found")

    def _layout_grid(self, rows: list[Tag]) -> tuple[dict[int, time], list[_GridCell]]:
        """Place cells on the grid, honouring row and column spans."""
        occupied: set[tuple[int, int]] = set()
        labels: dict[int, time] = {}
        cells: list[_GridCell] = []

        for row_index, row in enumerate(rows):
            column = 0
            for cell in _row_cells(row):
                while (row_index, column) in occupied:
                    column += 1
                rowspan = _span(cell, "rowspan")
                colspan = _span(cell, "colspan")
                for r in range(row_index, row_index + rowspan):
                    for c in range(column, column + colspan):
                        occupied.add((r, c))

                if column == 0:
                    label = parse_time(_cell_text(cell))
                    if label is not None:
                        labels[row_index] = label
                else:
                    lines = _cell_lines(cell)
                    if lines:
                        cells.append(_GridCell(row_index, column, rowspan, lines))
                column += colspan

        return labels, cells

    @staticmethod
    def _slot_length(labels: dict[int, time]) -> tuple[int, time, timedelta]:
        """Return the first labelled row, its time and the length of one row."""
        if not labels:
            raise SkedParseError("Sked week grid has no time labels")
        ordered = sorted(labels.items())
        first_row, first_time = ordered[0]
        if len(ordered) == 1:
            return first_row, first_time, timedelta(minutes=DEFAULT_SLOT_MINUTES)

        second_row, second_time = ordered[1]
        minutes = (
            (second_time.hour * 60 + second_time.minute) - (first_time.hour * 60 + first_time.minute)
        ) / (second_row - first_row)
        if minutes <= 0:
            raise SkedParseError("Sked week grid time labels are not ascending")
        return first_row, first_time, timedelta(minutes=minutes)

    def parse_graphical(self, html: str, faculty: str | None = None) -> list[RawLecture]:
        """Parse the graphical week view of a sked timetable.

        Cell lines are read as title, lecturer(s) and room. The grid does not
        name the organiser, so the faculty hint is used instead.

        Raises:
            SkedParseError: If no week grid with day headers and time labels is found.
        """
        soup = BeautifulSoup(html, "html.parser")
        days, rows = self._find_grid(soup)
        labels, cells = self._layout_grid(rows)
        first_row, first_time, slot = self._slot_length(labels)

        lectures: list[RawLecture] = []
        for cell in sorted(cells, key=lambda c: (c.column, c.row)):
            day_index = cell.column - 1
            if day_index >= len(days):
                logger.warning(f"Ignoring sked cell outside the day columns: {cell.lines[0]}")
                continue
            start = self._at(days[day_index], first_time) + (cell.row - first_row) * slot
            end = start + cell.rowspan * slot
            lines = cell.lines
            lectures.append(
                RawLecture(
                    title=lines[0],
                    start=start,
                    end=end,
                    room=lines[-1] if len(lines) > 1 else "",
                    lecturer=" ".join(lines[1:-1]),
                    organiser_name=faculty or "",
                    organiser_shortname=faculty or "",
                )
            )

        lectures.sort(key=lambda lecture: lecture.start)
        logger.debug(f"Parsed {len(lectures)} lectures from graphical view")
        return lectures
