""" exceptions raised by iphoto2exif """


class Iphoto2ExifError(Exception):
    """ base class for all iphoto2exif errors """


class CatalogParseError(Iphoto2ExifError):
    """ catalog could not be read or is malformed; fatal for the run """


class DateFormatError(Iphoto2ExifError):
    """ DateTimeOriginal could not be parsed """

    def __init__(self, value):
        self.value = value
        super().__init__(f"Could not parse date format {value}")


class TagReadError(Iphoto2ExifError):
    """ exiftool could not read the tags of an image """


class TagWriteError(Iphoto2ExifError):
    """ exiftool could not write the tags of an image """


class BackupCopyError(Iphoto2ExifError):
    """ backup copy of an image could not be made """


class TimestampUpdateError(Iphoto2ExifError):
    """ modification/access time of an image could not be set """
