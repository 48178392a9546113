import calendar
import time
from datetime import datetime, timedelta, timezone

import pytest

from plistkit.time64 import (
    TM,
    asctime64,
    ctime64,
    gmtime64,
    is_leap,
    localtime64,
    mktime64,
    timegm64,
    timelocal64,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "year, expected",
    [(2000, True), (1900, False), (2004, True), (2100, False), (2023, False), (1600, True)],
)
def test_is_leap(year, expected):
    assert is_leap(year) is expected


def test_gmtime_epoch():
    tm = gmtime64(0)
    assert (tm.tm_year, tm.tm_mon, tm.tm_mday) == (70, 0, 1)
    assert (tm.tm_hour, tm.tm_min, tm.tm_sec) == (0, 0, 0)
    assert tm.tm_wday == 4
    assert tm.tm_yday == 0
    assert tm.tm_zone == "UTC"


def test_gmtime_cheat_point():
    tm = gmtime64(1199145600)
    assert (tm.tm_year, tm.tm_mon, tm.tm_mday, tm.tm_yday) == (108, 0, 1, 0)


@pytest.mark.parametrize(
    "t",
    [
        -62135596800,
        -2208988800,
        -86401,
        -1,
        0,
        951782400,
        1199145599,
        1199145600,
        2147483648,
        4107542400,
        253402300799,
    ],
)
def test_gmtime_matches_datetime(t):
    expected = EPOCH + timedelta(seconds=t)
    tm = gmtime64(t)
    assert tm.tm_year + 1900 == expected.year
    assert tm.tm_mon + 1 == expected.month
    assert tm.tm_mday == expected.day
    assert (tm.tm_hour, tm.tm_min, tm.tm_sec) == (expected.hour, expected.minute, expected.second)
    assert tm.tm_wday == (expected.weekday() + 1) % 7
    assert tm.tm_yday == expected.timetuple().tm_yday - 1


@pytest.mark.parametrize(
    "t", [0, -1, 1, 10**15, -(10**15), 2**62, -(2**62), 123456789012, -98765432109]
)
def test_timegm_inverts_gmtime(t):
    assert timegm64(gmtime64(t)) == t


@pytest.mark.parametrize(
    "fields",
    [
        (1970, 1, 1, 0, 0, 0),
        (1969, 12, 31, 23, 59, 59),
        (2000, 2, 29, 12, 30, 15),
        (1600, 3, 1, 0, 0, 0),
        (2400, 12, 31, 1, 2, 3),
        (1, 1, 1, 0, 0, 0),
        (9999, 12, 31, 23, 59, 59),
    ],
)
def test_timegm_matches_calendar(fields):
    year, month, day, hour, minute, sec = fields
    tm = TM(tm_sec=sec, tm_min=minute, tm_hour=hour, tm_mday=day,
            tm_mon=month - 1, tm_year=year - 1900)
    assert timegm64(tm) == calendar.timegm((year, month, day, hour, minute, sec, 0, 0, 0))


def test_timegm_normalises_day_overflow():
    overflow = TM(tm_mday=32, tm_mon=0, tm_year=100)
    next_month = TM(tm_mday=1, tm_mon=1, tm_year=100)
    assert timegm64(overflow) == timegm64(next_month)


def test_timegm_rejects_bad_month():
    with pytest.raises(ValueError):
        timegm64(TM(tm_mon=12))


def test_gmtime_day_fields_consistent():
    for t in range(-400 * 86400 * 366, 400 * 86400 * 366, 86400 * 97 + 13):
        tm = gmtime64(t)
        assert 0 <= tm.tm_mon <= 11
        assert 1 <= tm.tm_mday <= 31
        assert 0 <= tm.tm_yday <= 365
        assert timegm64(tm) == t


def test_asctime_epoch():
    assert asctime64(gmtime64(0)) == "Thu Jan  1 00:00:00 1970\n"


def test_asctime_matches_time_asctime():
    t = 1199145600 + 3 * 86400 + 3661
    expected = time.asctime(time.gmtime(t)) + "\n"
    assert asctime64(gmtime64(t)) == expected


def test_asctime_large_year():
    tm = gmtime64(timegm64(TM(tm_mday=5, tm_mon=6, tm_year=12345 - 1900)))
    assert asctime64(tm).endswith(" 12345\n")
    assert asctime64(tm)[4:7] == "Jul"


@pytest.mark.parametrize("wday, mon", [(7, 0), (-1, 0), (0, 12), (0, -1)])
def test_asctime_rejects_out_of_range(wday, mon):
    with pytest.raises(ValueError):
        asctime64(TM(tm_wday=wday, tm_mon=mon))


@pytest.mark.parametrize("t", [86400 * 400, 1199145600, 1500000000, 2000000000])
def test_localtime_matches_system(t):
    st = time.localtime(t)
    tm = localtime64(t)
    assert tm.tm_year + 1900 == st.tm_year
    assert tm.tm_mon + 1 == st.tm_mon
    assert tm.tm_mday == st.tm_mday
    assert (tm.tm_hour, tm.tm_min, tm.tm_sec) == (st.tm_hour, st.tm_min, st.tm_sec)
    assert tm.tm_yday == st.tm_yday - 1
    assert tm.tm_wday == (st.tm_wday + 1) % 7


@pytest.mark.parametrize("t", [86400 * 400, 1500000000])
def test_ctime_matches_system(t):
    assert ctime64(t) == time.ctime(t) + "\n"


def _noon_utc(year, month, day):
    return timegm64(TM(tm_hour=12, tm_mday=day, tm_mon=month - 1, tm_year=year - 1900))


@pytest.mark.parametrize("year", [1850, 1900, 2100, 2500, 3000, 10000])
def test_localtime_far_years_keep_date(year):
    t = _noon_utc(year, 6, 15)
    tm = localtime64(t)
    assert tm.tm_year + 1900 == year
    assert tm.tm_mon == 5
    assert tm.tm_mday in (14, 15, 16)


@pytest.mark.parametrize("year", [1985, 2020, 1850, 2100, 2500, 3000])
def test_mktime_inverts_localtime(year):
    t = _noon_utc(year, 6, 15)
    assert mktime64(localtime64(t)) == t


def test_timelocal_equals_mktime():
    tm = localtime64(_noon_utc(2222, 3, 10))
    assert timelocal64(tm) == mktime64(tm)
    assert timelocal64(tm) == _noon_utc(2222, 3, 10)


def test_localtime_weekday_matches_utc_far_future():
    t = _noon_utc(2600, 8, 20)
    gm = gmtime64(t)
    local = localtime64(t)
    delta = (local.tm_mday - gm.tm_mday) % 7
    assert (local.tm_wday - gm.tm_wday) % 7 == delta