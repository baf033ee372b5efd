"""
Crime categories, the reporting window and wide-table column naming.

The snapshot is a wide table: one `<CATEGORY>_<YEAR>` column per category
and year, plus the `hood_id` / `area_name` keys. Derived decade totals are
stored as `Total_<CATEGORY>`.
"""

from typing import Iterable, List, Tuple

ID_COLUMN = "hood_id"
NAME_COLUMN = "area_name"
KEY_COLUMNS = [ID_COLUMN, NAME_COLUMN]

TOTAL_PREFIX = "Total_"

YEAR_START = 2014
YEAR_END = 2023

CATEGORIES: Tuple[str, ...] = (
    "ASSAULT",
    "AUTOTHEFT",
    "BIKETHEFT",
    "BREAKENTER",
    "HOMICIDE",
    "ROBBERY",
    "SHOOTING",
    "THEFTFROMMV",
    "THEFTOVER",
)

# Spelled-out forms that squash to something other than the column token
CATEGORY_ALIASES = {
    "BREAKANDENTER": "BREAKENTER",
    "BREAKINGANDENTERING": "BREAKENTER",
    "THEFTFROMVEHICLE": "THEFTFROMMV",
    "THEFTFROMMOTORVEHICLE": "THEFTFROMMV",
    "SHOOTINGS": "SHOOTING",
    "HOMICIDES": "HOMICIDE",
}

CATEGORY_LABELS = {
    "ASSAULT": "Assault",
    "AUTOTHEFT": "Auto Theft",
    "BIKETHEFT": "Bike Theft",
    "BREAKENTER": "Break and Enter",
    "HOMICIDE": "Homicide",
    "ROBBERY": "Robbery",
    "SHOOTING": "Shooting",
    "THEFTFROMMV": "Theft from Motor Vehicle",
    "THEFTOVER": "Theft Over",
}


def year_range(year_start: int = YEAR_START, year_end: int = YEAR_END) -> Tuple[int, ...]:
    """Inclusive, ascending tuple of years."""
    if year_end < year_start:
        raise ValueError(f"year_end ({year_end}) is before year_start ({year_start})")
    return tuple(range(year_start, year_end + 1))


DEFAULT_YEARS = year_range()


def canonical_category(name: str) -> str:
    """
    Map a human-entered category name to its column token.

    "auto theft", "Auto-Theft" and "AUTOTHEFT" all become "AUTOTHEFT".
    Unknown names are upper-cased and squashed but otherwise passed through;
    whether they exist is decided against the table, not here.
    """
    token = "".join(ch for ch in str(name).upper() if ch.isalnum())
    return CATEGORY_ALIASES.get(token, token)


def category_label(category: str) -> str:
    """Display label for a category token."""
    token = canonical_category(category)
    return CATEGORY_LABELS.get(token, token.title())


def yearly_column(category: str, year: int) -> str:
    return f"{canonical_category(category)}_{int(year)}"


def yearly_columns(category: str, years: Iterable[int] = DEFAULT_YEARS) -> List[str]:
    """Per-year column names for one category, in ascending year order."""
    return [yearly_column(category, y) for y in sorted(years)]


def total_column(category: str) -> str:
    return f"{TOTAL_PREFIX}{canonical_category(category)}"


def all_yearly_columns(
    categories: Iterable[str] = CATEGORIES,
    years: Iterable[int] = DEFAULT_YEARS,
) -> List[str]:
    """Every per-year column for the given categories."""
    years = sorted(years)
    columns: List[str] = []
    for category in categories:
        columns.extend(yearly_columns(category, years))
    return columns
