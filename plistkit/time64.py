"""Calendar conversions with 64-bit years.

The platform's own local-time routines only cover a limited span of years.
Dates outside 1971-2037 are mapped onto an equivalent "safe" year with the
same leap status and weekday layout, converted there, and shifted back.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace

__all__ = [
    "TM",
    "is_leap",
    "timegm64",
    "gmtime64",
    "localtime64",
    "mktime64",
    "timelocal64",
    "asctime64",
    "ctime64",
]

_DAYS_IN_MONTH = (
    (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31),
    (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31),
)

_JULIAN_DAYS_BY_MONTH = (
    (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334),
    (0, 31, 60, 91, 121, 152, 182, 213, 244, 274, 305, 335),
)

_WDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_MON_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_LENGTH_OF_YEAR = (365, 366)

YEARS_IN_GREGORIAN_CYCLE = 400
DAYS_IN_GREGORIAN_CYCLE = (365 * 400) + 100 - 4 + 1
SECONDS_IN_GREGORIAN_CYCLE = DAYS_IN_GREGORIAN_CYCLE * 60 * 60 * 24

MAX_SAFE_YEAR = 2037
MIN_SAFE_YEAR = 1971
SOLAR_CYCLE_LENGTH = 28

_SAFE_YEARS_HIGH = (
    2016, 2017, 2018, 2019,
    2020, 2021, 2022, 2023,
    2024, 2025, 2026, 2027,
    2028, 2029, 2030, 2031,
    2032, 2033, 2034, 2035,
    2036, 2037, 2010, 2011,
    2012, 2013, 2014, 2015,
)

_SAFE_YEARS_LOW = (
    1996, 1997, 1998, 1971,
    1972, 1973, 1974, 1975,
    1976, 1977, 1978, 1979,
    1980, 1981, 1982, 1983,
    1984, 1985, 1986, 1987,
    1988, 1989, 1990, 1991,
    1992, 1993, 1994, 1995,
)

# Shortcut for dates near the present: days since the epoch on 2008-01-01.
_CHEAT_DAYS = 1199145600 // 24 // 60 // 60
_CHEAT_YEARS = 108


@dataclass
class TM:
    """Broken-down time; ``tm_year`` counts from 1900, ``tm_mon`` from 0."""

    tm_sec: int = 0
    tm_min: int = 0
    tm_hour: int = 0
    tm_mday: int = 1
    tm_mon: int = 0
    tm_year: int = 70
    tm_wday: int = 0
    tm_yday: int = 0
    tm_isdst: int = -1
    tm_gmtoff: int = 0
    tm_zone: str = ""


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def is_leap(year: int) -> bool:
    """Return whether the calendar year ``year`` is a Gregorian leap year."""
    return year % 400 == 0 or (year % 4 == 0 and year % 100 != 0)


def _tm_leap(tm_year: int) -> int:
    return int(is_leap(tm_year + 1900))


def _check_month(month: int) -> None:
    if not 0 <= month <= 11:
        raise ValueError(f"month out of range: {month}")


def _is_exception_century(year: int) -> bool:
    return year % 100 == 0 and year % 400 != 0


def _cycle_offset(year: int) -> int:
    start_year = 2000
    year_diff = year - start_year
    if year > start_year:
        year_diff -= 1
    exceptions = _tdiv(year_diff, 100) - _tdiv(year_diff, 400)
    return exceptions * 16


def _safe_year(year: int) -> int:
    """Pick a year in the safe range whose calendar matches ``year``."""
    if MIN_SAFE_YEAR <= year <= MAX_SAFE_YEAR:
        return year

    year_cycle = year + _cycle_offset(year)
    if year < MIN_SAFE_YEAR:
        year_cycle -= 8
    if _is_exception_century(year):
        year_cycle += 11
    if _is_exception_century(year - 1):
        year_cycle += 17
    year_cycle %= SOLAR_CYCLE_LENGTH

    if year < MIN_SAFE_YEAR:
        return _SAFE_YEARS_LOW[year_cycle]
    return _SAFE_YEARS_HIGH[year_cycle]


def _seconds_between_years(left_year: int, right_year: int) -> int:
    increment = 1 if left_year > right_year else -1
    seconds = 0

    if left_year > 2400:
        cycles = _tdiv(left_year - 2400, 400)
        left_year -= cycles * 400
        seconds += cycles * SECONDS_IN_GREGORIAN_CYCLE
    elif left_year < 1600:
        cycles = _tdiv(left_year - 1600, 400)
        left_year += cycles * 400
        seconds += cycles * SECONDS_IN_GREGORIAN_CYCLE

    while left_year != right_year:
        seconds += _LENGTH_OF_YEAR[int(is_leap(right_year))] * 60 * 60 * 24
        right_year += increment

    return seconds * increment


def timegm64(tm: TM) -> int:
    """Convert a UTC broken-down time to seconds since the epoch."""
    _check_month(tm.tm_mon)
    days = 0
    year = tm.tm_year

    if year > 100 or year < -300:
        cycles = _tdiv(year - 100, 400)
        year -= cycles * 400
        days += cycles * DAYS_IN_GREGORIAN_CYCLE

    if year > 70:
        days += sum(_LENGTH_OF_YEAR[_tm_leap(y)] for y in range(70, year))
    elif year < 70:
        days -= sum(_LENGTH_OF_YEAR[_tm_leap(y)] for y in range(year, 70))

    days += _JULIAN_DAYS_BY_MONTH[_tm_leap(year)][tm.tm_mon]
    days += tm.tm_mday - 1

    return days * 86400 + tm.tm_hour * 3600 + tm.tm_min * 60 + tm.tm_sec


def gmtime64(t: int) -> TM:
    """Break seconds since the epoch down into UTC calendar fields."""
    days, rem = divmod(int(t), 86400)
    hour, rem = divmod(rem, 3600)
    minute, sec = divmod(rem, 60)
    wday = (days + 4) % 7

    year = 70
    m = days
    if m >= _CHEAT_DAYS:
        year = _CHEAT_YEARS
        m -= _CHEAT_DAYS

    cycles, m = divmod(m, DAYS_IN_GREGORIAN_CYCLE)
    year += cycles * YEARS_IN_GREGORIAN_CYCLE

    leap = _tm_leap(year)
    while m >= _LENGTH_OF_YEAR[leap]:
        m -= _LENGTH_OF_YEAR[leap]
        year += 1
        leap = _tm_leap(year)

    month = 0
    while m >= _DAYS_IN_MONTH[leap][month]:
        m -= _DAYS_IN_MONTH[leap][month]
        month += 1

    return TM(
        tm_sec=sec,
        tm_min=minute,
        tm_hour=hour,
        tm_mday=m + 1,
        tm_mon=month,
        tm_year=year,
        tm_wday=wday,
        tm_yday=_JULIAN_DAYS_BY_MONTH[leap][month] + m,
        tm_isdst=0,
        tm_gmtoff=0,
        tm_zone="UTC",
    )


def _from_struct_time(st: time.struct_time) -> TM:
    return TM(
        tm_sec=st.tm_sec,
        tm_min=st.tm_min,
        tm_hour=st.tm_hour,
        tm_mday=st.tm_mday,
        tm_mon=st.tm_mon - 1,
        tm_year=st.tm_year - 1900,
        tm_wday=(st.tm_wday + 1) % 7,
        tm_yday=st.tm_yday - 1,
        tm_isdst=st.tm_isdst,
        tm_gmtoff=st.tm_gmtoff or 0,
        tm_zone=st.tm_zone or "",
    )


def localtime64(t: int) -> TM:
    """Break seconds since the epoch down into local calendar fields."""
    gm_tm = gmtime64(t)
    orig_year = gm_tm.tm_year

    if not (1970 - 1900) <= gm_tm.tm_year <= (2037 - 1900):
        gm_tm = replace(gm_tm, tm_year=_safe_year(orig_year + 1900) - 1900)

    local = _from_struct_time(time.localtime(timegm64(gm_tm)))
    local.tm_year = orig_year

    month_diff = local.tm_mon - gm_tm.tm_mon
    if month_diff == 11:
        local.tm_year -= 1
    elif month_diff == -11:
        local.tm_year += 1

    if not is_leap(local.tm_year + 1900) and local.tm_yday == 365:
        local.tm_yday -= 1

    return local


def mktime64(tm: TM) -> int:
    """Convert a local broken-down time to seconds since the epoch."""
    year = tm.tm_year + 1900
    safe = _safe_year(year)
    timev = int(time.mktime((
        safe,
        tm.tm_mon + 1,
        tm.tm_mday,
        tm.tm_hour,
        tm.tm_min,
        tm.tm_sec,
        0,
        1,
        tm.tm_isdst,
    )))
    normalized_year = time.localtime(timev).tm_year
    return timev + _seconds_between_years(year, normalized_year)


def timelocal64(tm: TM) -> int:
    """Alias of :func:`mktime64`."""
    return mktime64(tm)


def _two_digits(value: int) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{abs(value):02d}"


def asctime64(tm: TM) -> str:
    """Format a broken-down time like ``Thu Jan  1 00:00:00 1970``."""
    if not 0 <= tm.tm_wday <= 6:
        raise ValueError(f"weekday out of range: {tm.tm_wday}")
    _check_month(tm.tm_mon)
    return (
        f"{_WDAY_NAMES[tm.tm_wday]} {_MON_NAMES[tm.tm_mon]}{tm.tm_mday:3d} "
        f"{_two_digits(tm.tm_hour)}:{_two_digits(tm.tm_min)}:"
        f"{_two_digits(tm.tm_sec)} {1900 + tm.tm_year}\n"
    )


def ctime64(t: int) -> str:
    """Format seconds since the epoch as local time."""
    return asctime64(localtime64(t))