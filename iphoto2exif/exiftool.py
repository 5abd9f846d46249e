""" Read and write the embedded metadata of an image with exiftool

    Dependencies:
      exiftool by Phil Harvey:
          https://exiftool.org/
"""

import json
import logging
import subprocess
import sys
from functools import lru_cache

from ._constants import (
    _TAG_COMMENT,
    _TAG_DATE,
    _TAG_KEYWORDS,
    _TAG_LATITUDE,
    _TAG_LONGITUDE,
    _TAG_PERSONS,
    _TAG_RATING,
)
from ._util import build_list, check_file_exists
from .errors import TagReadError, TagWriteError

logger = logging.getLogger(__name__)

# tags read from each image, -n returns GPS as signed decimal degrees
_READ_TAGS = [
    f"-{_TAG_PERSONS}",
    f"-{_TAG_KEYWORDS}",
    f"-{_TAG_COMMENT}",
    f"-{_TAG_RATING}",
    f"-Composite:{_TAG_LATITUDE}",
    f"-Composite:{_TAG_LONGITUDE}",
    f"-{_TAG_DATE}",
]


@lru_cache(maxsize=1)
def get_exiftool_path():
    """ return path of exiftool, cache result """
    result = subprocess.run(["which", "exiftool"], stdout=subprocess.PIPE)
    exiftool_path = result.stdout.decode("utf-8")
    logger.debug("exiftool path = %s" % (exiftool_path))
    if exiftool_path:
        return exiftool_path.rstrip()
    else:
        sys.exit(
            "Could not find exiftool. Please download and install from "
            "https://exiftool.org/"
        )


def _stderr(e):
    if e.stderr:
        return e.stderr.decode("utf-8", errors="replace").strip()
    return str(e)


def _log_warnings(proc):
    """ send exiftool's stderr (e.g. "Warning: ...") of a successful run to the log """
    if not proc.stderr:
        return
    for line in proc.stderr.decode("utf-8", errors="replace").splitlines():
        if line.strip():
            logger.warning(line.strip())


class ExifTool:
    """ embedded tags of one image file
        read() loads current values, set_* stages new values,
        write() flushes the staged values to the file """

    def __init__(self, photopath, exiftool=None):
        self.photopath = str(photopath)
        self._exiftool = exiftool
        self._data = {}
        self._new_values = {}

    @property
    def exiftool(self):
        if self._exiftool is None:
            self._exiftool = get_exiftool_path()
        return self._exiftool

    def read(self):
        """ get current tag values from file as JSON via exiftool """

        if not check_file_exists(self.photopath):
            raise TagReadError(
                "Photopath %s does not appear to be valid file" % self.photopath
            )

        exif_cmd = [self.exiftool, "-j", "-n", *_READ_TAGS, self.photopath]
        logger.debug(f"running: {exif_cmd}")

        try:
            proc = subprocess.run(
                exif_cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            )
        except subprocess.CalledProcessError as e:
            raise TagReadError(
                f"Could not read {self.photopath}: {_stderr(e)}"
            ) from e
        except OSError as e:
            raise TagReadError(f"Could not run {self.exiftool}: {e}") from e

        _log_warnings(proc)
        logger.debug("returncode: %d" % proc.returncode)
        logger.debug(
            "Have {} bytes in stdout:\n{}".format(
                len(proc.stdout), proc.stdout.decode("utf-8")
            )
        )

        try:
            j = json.loads(proc.stdout.decode("utf-8").rstrip("\r\n"))
        except ValueError as e:
            raise TagReadError(f"Invalid exiftool output for {self.photopath}: {e}") from e

        self._data = j[0] if j else {}
        return self._data

    def _get_list(self, tag):
        return [str(x) for x in build_list([self._data.get(tag)])]

    def get_persons(self):
        return self._get_list(_TAG_PERSONS)

    def get_keywords(self):
        return self._get_list(_TAG_KEYWORDS)

    def get_comment(self):
        comment = self._data.get(_TAG_COMMENT)
        return None if comment is None else str(comment)

    def get_rating(self):
        rating = self._data.get(_TAG_RATING)
        try:
            return None if rating is None else float(rating)
        except (TypeError, ValueError):
            return None

    def get_location(self):
        """ return (latitude, longitude), either may be None """
        location = []
        for tag in (_TAG_LATITUDE, _TAG_LONGITUDE):
            try:
                location.append(float(self._data[tag]))
            except (KeyError, TypeError, ValueError):
                location.append(None)
        return tuple(location)

    def get_date_original(self):
        date = self._data.get(_TAG_DATE)
        return None if date is None else str(date)

    def set_persons(self, persons):
        self._new_values[_TAG_PERSONS] = list(persons)

    def set_keywords(self, keywords):
        self._new_values[_TAG_KEYWORDS] = list(keywords)

    def set_comment(self, comment):
        self._new_values[_TAG_COMMENT] = comment

    def set_rating(self, rating):
        self._new_values[_TAG_RATING] = int(rating)

    def set_location(self, latitude, longitude):
        self._new_values[_TAG_LATITUDE] = latitude
        self._new_values[_TAG_LONGITUDE] = longitude

    def _write_args(self):
        args = []
        for person in self._new_values.get(_TAG_PERSONS, []):
            args.append(f"-XMP:{_TAG_PERSONS}={person}")
        for keyword in self._new_values.get(_TAG_KEYWORDS, []):
            args.append(f"-IPTC:{_TAG_KEYWORDS}={keyword}")
        if _TAG_COMMENT in self._new_values:
            args.append(f"-EXIF:{_TAG_COMMENT}={self._new_values[_TAG_COMMENT]}")
        if _TAG_RATING in self._new_values:
            args.append(f"-XMP:{_TAG_RATING}={self._new_values[_TAG_RATING]}")
        if _TAG_LATITUDE in self._new_values:
            latitude = self._new_values[_TAG_LATITUDE]
            longitude = self._new_values[_TAG_LONGITUDE]
            args.append(f"-GPSLatitude={abs(latitude)}")
            args.append(f"-GPSLatitudeRef={'N' if latitude >= 0 else 'S'}")
            args.append(f"-GPSLongitude={abs(longitude)}")
            args.append(f"-GPSLongitudeRef={'E' if longitude >= 0 else 'W'}")
        return args

    def write(self):
        """ flush staged values to the file
            returns False if nothing was staged, True if exiftool ran
            raises TagWriteError with exiftool's error message on failure """
        args = self._write_args()
        if not args:
            logger.debug(f"Nothing staged for {self.photopath}")
            return False

        exif_cmd = [
            self.exiftool,
            "-codedcharacterset=utf8",
            *args,
            "-overwrite_original",
            self.photopath,
        ]
        logger.debug(f"running: {exif_cmd}")

        # SECURITY NOTE: none of the args to exiftool are shell quoted
        # as subprocess.run does this as long as shell=True is not used
        try:
            proc = subprocess.run(
                exif_cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            )
        except subprocess.CalledProcessError as e:
            raise TagWriteError(
                f"Could not write to {self.photopath}: {_stderr(e)}"
            ) from e
        except OSError as e:
            raise TagWriteError(f"Could not run {self.exiftool}: {e}") from e

        logger.debug("returncode: %d" % proc.returncode)
        logger.debug(proc.stdout.decode("utf-8", errors="replace"))
        _log_warnings(proc)
        self._new_values = {}
        return True
