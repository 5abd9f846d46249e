""" Parse the DateTimeOriginal value read by exiftool """

import datetime
import re

from ._constants import _DATE_SEPARATOR
from .errors import DateFormatError

# separators are matched independently, "2010.07/04 13:05:09" is valid
_DATE_RE = re.compile(
    r"""
    (?P<year>(19|20)\d{{2}})
    {sep}
    (?P<month>\d{{1,2}})
    {sep}
    (?P<day>\d{{1,2}})
    [ ]
    (?P<hour>\d{{1,2}})
    {sep}
    (?P<minute>\d{{1,2}})
    {sep}
    (?P<second>\d{{1,2}})
    """.format(
        sep=_DATE_SEPARATOR
    ),
    re.VERBOSE,
)

_FIELDS = ("year", "month", "day", "hour", "minute", "second")


def parse_date(value):
    """ parse value (e.g. "2010:07:04 13:05:09") into a naive datetime
        only the start of value has to match so trailing sub-seconds or 
        time zone offsets are ignored
        raises DateFormatError if value can't be parsed """
    if not isinstance(value, str):
        raise DateFormatError(value)

    match = _DATE_RE.match(value)
    if not match:
        raise DateFormatError(value)

    try:
        return datetime.datetime(*(int(match.group(f)) for f in _FIELDS))
    except ValueError:
        # matched the pattern but isn't a valid date, e.g. month 13
        raise DateFormatError(value) from None
