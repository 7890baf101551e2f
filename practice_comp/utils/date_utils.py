# practice_comp/utils/date_utils.py

"""Calendar helpers converting between portions of a year and calendar days."""

import calendar
from datetime import date, timedelta

from practice_comp.utils.decimal_helpers import round_half_up


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def day_of_year_to_date(day_of_year: int, year: int) -> date:
    """Day 1 is Jan 1. Days past the end of the year roll into the next year."""
    return date(year, 1, 1) + timedelta(days=day_of_year - 1)


def date_to_day_of_year(d: date) -> int:
    return d.timetuple().tm_yday


def calendar_date_to_portion(month: int, day: int, year: int) -> float:
    """
    Convert a calendar date to the portion of the year elapsed before it.
    Jan 1 -> 0.0; the portion grows by 1/days_in_year per day.
    """
    day_of_year = date_to_day_of_year(date(year, month, day))
    return (day_of_year - 1) / days_in_year(year)


def portion_to_day_of_year(portion: float, year: int) -> int:
    """
    Convert a portion of the year into a 1-based day of year.

    A portion of 0 is Jan 1 (day 1); a portion of 1 is the day after the last
    day of the year (days_in_year + 1).
    """
    total_days = days_in_year(year)
    return max(1, int(round_half_up(portion * total_days)) + 1)


# Aliases named after the role transitions that use them
start_portion_to_start_day = portion_to_day_of_year
employee_portion_to_transition_day = portion_to_day_of_year


def portion_to_date(portion: float, year: int) -> date:
    return day_of_year_to_date(portion_to_day_of_year(portion, year), year)
