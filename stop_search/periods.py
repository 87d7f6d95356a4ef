"""Reporting months and the backwards window of months fetched per run."""
from dataclasses import dataclass

from stop_search.errors import InvalidArgument


@dataclass(frozen=True, order=True)
class Period:
    year: int
    month: int

    def __post_init__(self):
        if isinstance(self.year, bool) or not isinstance(self.year, int) or self.year < 1900:
            raise InvalidArgument(f"Year must be an integer >= 1900, got {self.year!r}")
        if isinstance(self.month, bool) or not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise InvalidArgument(f"Month must be an integer between 1 and 12, got {self.month!r}")

    @classmethod
    def parse(cls, text):
        """Parse ``YYYY-MM`` (anything after the month, e.g. a day, is ignored)."""
        if not isinstance(text, str) or len(text) < 7 or text[4] != "-":
            raise InvalidArgument(f"Expected a YYYY-MM date, got {text!r}")
        year, month = text[0:4], text[5:7]
        if not (year.isdigit() and month.isdigit()):
            raise InvalidArgument(f"Expected a YYYY-MM date, got {text!r}")
        return cls(int(year), int(month))

    def previous(self):
        if self.month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, self.month - 1)

    def __str__(self):
        return f"{self.year:04d}-{self.month:02d}"


def check_count(count):
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidArgument(f"Month count must be a positive integer, got {count!r}")
    return count


def generate_window(start, count):
    """Return ``count`` months walking backwards from ``start`` (inclusive)."""
    check_count(count)
    # months since January 1900
    if start.year * 12 + start.month - 1 - (count - 1) < 1900 * 12:
        raise InvalidArgument(f"{count} months back from {start} would go before 1900-01")

    window = [start]
    while len(window) < count:
        window.append(window[-1].previous())
    return tuple(window)
