"""
Constants used by iphoto2exif
"""

import os.path

# default location of the iPhoto catalog
_IPHOTO_ALBUM = os.path.join(
    os.path.expanduser("~"), "Pictures", "iPhoto Library", "AlbumData.xml"
)

# names of the top level sections in AlbumData.xml
_SECTION_FACES = "List of Faces"
_SECTION_KEYWORDS = "List of Keywords"
_SECTION_IMAGES = "Master Image List"

# fields of a face record in "List of Faces"
_FACE_KEY = "key"
_FACE_NAME = "name"

# fields of an image record in "Master Image List"
_IMAGE_ORIGINAL_PATH = "OriginalPath"
_IMAGE_PATH = "ImagePath"
_IMAGE_LATITUDE = "latitude"
_IMAGE_LONGITUDE = "longitude"
_IMAGE_RATING = "Rating"
_IMAGE_COMMENT = "Comment"
_IMAGE_FACES = "Faces"
_IMAGE_KEYWORDS = "Keywords"
_IMAGE_FACE_KEY = "face key"

# exiftool tag names
_TAG_PERSONS = "PersonInImage"
_TAG_KEYWORDS = "Keywords"
_TAG_COMMENT = "UserComment"
_TAG_RATING = "Rating"
_TAG_LATITUDE = "GPSLatitude"
_TAG_LONGITUDE = "GPSLongitude"
_TAG_DATE = "DateTimeOriginal"

# characters allowed between the fields of DateTimeOriginal
_DATE_SEPARATOR = r"[.:/]"

# prefix for backup copies of modified images
_BACKUP_PREFIX = "_"

# number of decimal digits compared for geo coordinates
_GEO_PRECISION = 4
