""" Read iPhoto's AlbumData.xml catalog and index the faces, keywords
    and master images it contains """

import logging
import os.path
import xml.etree.ElementTree as ET
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from ._constants import (
    _FACE_KEY,
    _FACE_NAME,
    _IMAGE_COMMENT,
    _IMAGE_FACE_KEY,
    _IMAGE_FACES,
    _IMAGE_KEYWORDS,
    _IMAGE_LATITUDE,
    _IMAGE_LONGITUDE,
    _IMAGE_ORIGINAL_PATH,
    _IMAGE_PATH,
    _IMAGE_RATING,
    _SECTION_FACES,
    _SECTION_IMAGES,
    _SECTION_KEYWORDS,
)
from .errors import CatalogParseError
from .plist import PlistTag, decode_mapping

logger = logging.getLogger(__name__)


def ref_key(value):
    """ normalize a face key or keyword id to str
        integral numbers are written without fraction so that 
        <integer>3</integer>, <real>3</real> and <string>3</string> match """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _optional_float(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass
class ImageRecord:
    """ One entry of the master image list """

    image_id: str
    path: Optional[str]
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: Optional[int] = None
    comment: Optional[str] = None
    face_refs: List[str] = field(default_factory=list)
    keyword_refs: List[str] = field(default_factory=list)

    @property
    def directory(self):
        """ directory of the image or None if record has no path """
        if not self.path:
            return None
        return os.path.dirname(self.path)

    @classmethod
    def from_plist(cls, image_id, image):
        """ build an ImageRecord from the decoded image dict """
        path = image.get(_IMAGE_ORIGINAL_PATH) or image.get(_IMAGE_PATH) or None

        rating = image.get(_IMAGE_RATING)
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            rating = None
        else:
            rating = int(rating)

        comment = image.get(_IMAGE_COMMENT)
        if not isinstance(comment, str):
            comment = None

        face_refs = []
        for face in image.get(_IMAGE_FACES) or []:
            if isinstance(face, dict):
                key = ref_key(face.get(_IMAGE_FACE_KEY))
                if key is not None:
                    face_refs.append(key)

        keyword_refs = []
        for keyword_id in image.get(_IMAGE_KEYWORDS) or []:
            key = ref_key(keyword_id)
            if key is not None:
                keyword_refs.append(key)

        return cls(
            image_id=image_id,
            path=path,
            latitude=_optional_float(image.get(_IMAGE_LATITUDE)),
            longitude=_optional_float(image.get(_IMAGE_LONGITUDE)),
            rating=rating,
            comment=comment,
            face_refs=face_refs,
            keyword_refs=keyword_refs,
        )


class CatalogIndex:
    """ Persons, keywords and images found in the catalog 
        persons: dict of face key --> person name
        keywords: dict of keyword id --> keyword
        images: list of ImageRecord in catalog order """

    def __init__(self, persons=None, keywords=None, images=None):
        self.persons = persons if persons is not None else {}
        self.keywords = keywords if keywords is not None else {}
        self.images = images if images is not None else []

    @classmethod
    def build(cls, root):
        """ build the index from the decoded top level dict of the catalog """
        persons = {}
        faces = root.get(_SECTION_FACES)
        if isinstance(faces, dict):
            for face in faces.values():
                if not isinstance(face, dict):
                    continue
                key = ref_key(face.get(_FACE_KEY))
                name = face.get(_FACE_NAME)
                if key is None or not isinstance(name, str):
                    continue
                persons[key] = name
        else:
            logger.debug(f"No '{_SECTION_FACES}' in catalog")
        logger.info(f"Fetching faces ({len(persons)})")

        keywords = {}
        keyword_list = root.get(_SECTION_KEYWORDS)
        if isinstance(keyword_list, dict):
            for keyword_id, keyword in keyword_list.items():
                if isinstance(keyword, str):
                    keywords[ref_key(keyword_id)] = keyword
        else:
            logger.debug(f"No '{_SECTION_KEYWORDS}' in catalog")
        logger.info(f"Fetching keywords ({len(keywords)})")

        images = []
        image_list = root.get(_SECTION_IMAGES)
        if isinstance(image_list, dict):
            for image_id, image in image_list.items():
                if isinstance(image, dict):
                    images.append(ImageRecord.from_plist(image_id, image))
        else:
            logger.debug(f"No '{_SECTION_IMAGES}' in catalog")
        logger.info(f"Fetching images ({len(images)})")

        return cls(persons=persons, keywords=keywords, images=images)

    def resolve_persons(self, record):
        """ return names for the faces of record, in face order
            unknown face keys and repeated names are skipped """
        return _resolve(record.face_refs, self.persons)

    def resolve_keywords(self, record):
        """ return keywords for the keyword ids of record, in catalog order
            unknown ids and repeated keywords are skipped """
        return _resolve(record.keyword_refs, self.keywords)

    def persons_as_dict(self):
        """ return dict of person name --> number of images """
        return self._count(self.resolve_persons)

    def keywords_as_dict(self):
        """ return dict of keyword --> number of images """
        return self._count(self.resolve_keywords)

    def _count(self, resolve):
        counts = Counter()
        for record in self.images:
            counts.update(resolve(record))
        return dict(sorted(counts.items()))


def _resolve(refs, index):
    resolved = []
    for ref in refs:
        value = index.get(ref)
        if value is None or value in resolved:
            continue
        resolved.append(value)
    return resolved


def parse_catalog(source):
    """ parse catalog XML from a filename or file object
        returns the decoded top level dict
        raises CatalogParseError if the catalog can't be read """
    try:
        tree = ET.parse(source)
    except (ET.ParseError, OSError) as e:
        raise CatalogParseError(f"Could not parse iPhoto album: {e}") from e

    root = tree.getroot()
    if root.tag != "plist":
        raise CatalogParseError(f"Expected <plist> root element, found <{root.tag}>")

    top = next(
        (node for node in root if PlistTag.from_element(node) is PlistTag.DICT), None
    )
    if top is None:
        raise CatalogParseError("No top level <dict> in catalog")
    return decode_mapping(top)


def load_catalog(source):
    """ read the catalog at source and return its CatalogIndex """
    logger.info(f"Reading iPhoto album {source}")
    return CatalogIndex.build(parse_catalog(source))
