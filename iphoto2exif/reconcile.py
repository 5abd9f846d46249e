""" Reconcile iPhoto catalog metadata with the embedded tags of each image

    Metadata extracted from the catalog and where it is placed:
    iPhoto faces --> XMP:PersonInImage
    iPhoto keywords --> IPTC:Keywords
    iPhoto comment --> EXIF:UserComment
    iPhoto rating --> XMP:Rating
    iPhoto latitude/longitude --> GPSLatitude, GPSLongitude (+ Ref)

    comment, rating and location are overwritten in the image file
    faces and keywords are merged with any data found in the image file
    (removing duplicates)
"""

import enum
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tqdm import tqdm

from ._constants import _GEO_PRECISION
from ._logging import LOGGER_NAME, capture_warnings
from ._util import backup_file, check_file_exists, is_included, set_file_time
from .dates import parse_date
from .errors import (
    BackupCopyError,
    DateFormatError,
    TagReadError,
    TagWriteError,
    TimestampUpdateError,
)
from .exiftool import ExifTool


class ImageState(enum.Enum):
    """ outcome of processing an image
        the intermediate steps (tags loaded, date parsed, plan computed,
        tags written, file time set) run in sequence inside
        MetadataReconciler.process and are not recorded here """

    FILTERED = "filtered"
    MISSING = "missing"
    READ_FAILED = "read failed"
    DATE_FAILED = "date failed"
    DONE = "done"


@dataclass
class ReconciliationPlan:
    """ tag values to write to one image; None means leave the tag alone """

    persons: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    comment: Optional[str] = None
    rating: Optional[int] = None
    location: Optional[Tuple[float, float]] = None

    @property
    def dirty(self):
        """ True if at least one tag differs from the image """
        return any(
            value is not None
            for value in (
                self.persons,
                self.keywords,
                self.comment,
                self.rating,
                self.location,
            )
        )

    def apply(self, tags):
        """ stage the planned values on tags """
        if self.persons is not None:
            tags.set_persons(self.persons)
        if self.keywords is not None:
            tags.set_keywords(self.keywords)
        if self.comment is not None:
            tags.set_comment(self.comment)
        if self.rating is not None:
            tags.set_rating(self.rating)
        if self.location is not None:
            tags.set_location(*self.location)


@dataclass
class ImageResult:
    """ outcome of processing one ImageRecord """

    record: object
    state: ImageState
    plan: Optional[ReconciliationPlan] = None
    written: bool = False
    errors: List[str] = field(default_factory=list)


def merge_names(existing, candidates):
    """ add candidates not already in existing
        returns (sorted merged list, True if anything was added) """
    merged = list(existing)
    changed = False
    for name in candidates:
        if name in merged:
            continue
        merged.append(name)
        changed = True
    return sorted(merged), changed


def _round_geo(value):
    return float("%.*f" % (_GEO_PRECISION, value))


def compute_plan(record, index, tags, logger=None):
    """ compare catalog record with current tags of the image
        record: ImageRecord
        index: CatalogIndex used to resolve faces and keywords
        tags: tag reader, e.g. ExifTool after read()
        returns ReconciliationPlan """
    logger = logger or logging.getLogger(LOGGER_NAME)
    plan = ReconciliationPlan()

    # faces
    persons = index.resolve_persons(record)
    if persons:
        existing = tags.get_persons()
        persons_list, persons_changed = merge_names(existing, persons)
        if persons_changed and persons_list:
            for person in persons:
                if person not in existing:
                    logger.debug(f"- Add person {person}")
            plan.persons = persons_list

    # keywords
    keywords = index.resolve_keywords(record)
    if keywords:
        keywords_list, keywords_changed = merge_names(tags.get_keywords(), keywords)
        if keywords_changed:
            logger.debug(f"- Add keywords {', '.join(keywords)}")
            plan.keywords = keywords_list

    # user comment
    if record.comment:
        if tags.get_comment() != record.comment:
            logger.debug("- Set user comment")
            plan.comment = record.comment

    # user rating
    if record.rating and record.rating > 0:
        old_rating = tags.get_rating() or 0
        if old_rating != record.rating:
            logger.debug(f"- Set rating {record.rating}")
            plan.rating = record.rating

    # geo tags; both coordinates have to differ from the image
    if record.latitude is not None and record.longitude is not None:
        old_latitude, old_longitude = tags.get_location()
        old_latitude = old_latitude or 0
        old_longitude = old_longitude or 0
        latitude_changed = _round_geo(record.latitude) != _round_geo(old_latitude)
        longitude_changed = _round_geo(record.longitude) != _round_geo(old_longitude)
        if latitude_changed and longitude_changed:
            logger.debug(
                "- Set geo location %fN,%fE" % (record.latitude, record.longitude)
            )
            plan.location = (record.latitude, record.longitude)

    return plan


class MetadataReconciler:
    """ Write catalog metadata to the images of a CatalogIndex

        index: CatalogIndex
        directories: only process images inside these directories (default: all)
        excludes: skip images inside these directories
        changetime: set file mtime/atime to DateTimeOriginal
        backup: copy each image to _filename.ext before writing
        test: compute changes but don't modify any file
        tagio: callable taking an image path, returns tag reader/writer
        logger: logging.Logger to report progress and errors to """

    def __init__(
        self,
        index,
        directories=None,
        excludes=None,
        changetime=True,
        backup=False,
        test=False,
        tagio=ExifTool,
        logger=None,
    ):
        self.index = index
        self.directories = list(directories or [])
        self.excludes = list(excludes or [])
        self.changetime = changetime
        self.backup = backup
        self.test = test
        self.tagio = tagio
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def included(self, record):
        return is_included(record.directory, self.directories, self.excludes)

    def process(self, record):
        """ process a single ImageRecord, returns ImageResult """
        logger = self.logger

        if not record.path:
            message = f"Image {record.image_id} has no path in the catalog"
            logger.error(message)
            return ImageResult(record, ImageState.MISSING, errors=[message])

        if not self.included(record):
            logger.debug(f"Skipping {record.path}, not in selected directories")
            return ImageResult(record, ImageState.FILTERED)

        if not check_file_exists(record.path):
            message = f"Skipping missing photo {record.path}"
            logger.warning(message)
            return ImageResult(record, ImageState.MISSING, errors=[message])

        logger.info(f"Processing {record.path}")

        tags = self.tagio(record.path)
        try:
            tags.read()
        except TagReadError as e:
            logger.error(str(e))
            return ImageResult(record, ImageState.READ_FAILED, errors=[str(e)])

        try:
            date = parse_date(tags.get_date_original())
        except DateFormatError as e:
            logger.error(str(e))
            return ImageResult(record, ImageState.DATE_FAILED, errors=[str(e)])

        plan = compute_plan(record, self.index, tags, logger=logger)
        result = ImageResult(record, ImageState.DONE, plan=plan)

        # the write step always runs, even if no tag differs
        if not plan.dirty:
            logger.debug(f"- No changes detected for {record.path}")
        self._write(record, tags, plan, result)

        if self.changetime:
            if self.test:
                logger.info(f"TEST: Change file time to {date.isoformat()}")
            else:
                logger.debug(f"- Change file time to {date.isoformat()}")
                try:
                    set_file_time(record.path, date)
                except TimestampUpdateError as e:
                    logger.error(str(e))
                    result.errors.append(str(e))

        return result

    def _write(self, record, tags, plan, result):
        logger = self.logger
        if self.test:
            logger.info(f"TEST: Processed {record.path}: {plan}")
            return

        if self.backup:
            try:
                dest = backup_file(record.path)
            except BackupCopyError as e:
                logger.error(str(e))
                result.errors.append(str(e))
            else:
                logger.debug(f"- Writing backup file to {dest}")

        plan.apply(tags)
        try:
            result.written = tags.write()
        except TagWriteError as e:
            logger.error(str(e))
            result.errors.append(str(e))
            return
        if result.written:
            logger.debug(f"- Exif data has been written to {record.path}")

    def run(self, noprogress=False):
        """ process all images of the index in catalog order
            warnings raised while running are sent to the logger
            returns Counter of processed, filtered, missing, failed """
        summary = Counter(processed=0, filtered=0, missing=0, failed=0)
        images = self.index.images
        with capture_warnings(self.logger):
            for record in tqdm(iterable=images, disable=noprogress):
                result = self.process(record)
                if result.state is ImageState.FILTERED:
                    summary["filtered"] += 1
                elif result.state is ImageState.MISSING:
                    summary["missing"] += 1
                elif result.state is ImageState.DONE and not result.errors:
                    summary["processed"] += 1
                else:
                    summary["failed"] += 1
        self.logger.info(
            "Processed %(processed)d image(s), %(filtered)d filtered, "
            "%(missing)d missing, %(failed)d failed" % summary
        )
        return summary
