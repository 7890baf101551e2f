from .date_utils import (
    calendar_date_to_portion,
    day_of_year_to_date,
    days_in_year,
    portion_to_date,
    portion_to_day_of_year,
)
from .decimal_helpers import clamp, round_half_up, to_money

__all__ = [
    "calendar_date_to_portion",
    "day_of_year_to_date",
    "days_in_year",
    "portion_to_date",
    "portion_to_day_of_year",
    "clamp",
    "round_half_up",
    "to_money",
]
