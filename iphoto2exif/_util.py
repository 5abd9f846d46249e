# util functions for iphoto2exif

import os
import os.path
import shutil

from ._constants import _BACKUP_PREFIX
from .errors import BackupCopyError, TimestampUpdateError


def check_file_exists(filename):
    """ return true if a file exists on disk and is not a directory, """
    """ otherwise return false """

    filename = os.path.abspath(filename)
    return os.path.exists(filename) and not os.path.isdir(filename)


def build_list(lst):
    """ input: array of elements that may be a string or list """
    """ returns: appends all input items to a list and returns the list """
    tmplst = []
    for x in lst:
        if x is not None:
            if isinstance(x, list):
                tmplst = tmplst + x
            else:
                tmplst.append(x)
    return tmplst


def _normalize_dir(directory):
    return os.path.normpath(os.path.abspath(os.path.expanduser(str(directory))))


def directory_contains(directory, other):
    """ return True if other is directory or one of its descendants """
    """ paths are compared as normalized absolute paths, symlinks are not resolved """
    directory = _normalize_dir(directory)
    other = _normalize_dir(other)
    if directory == other:
        return True
    return other.startswith(directory.rstrip(os.sep) + os.sep)


def is_included(image_directory, include_dirs=None, exclude_dirs=None):
    """ decide if an image in image_directory should be processed """
    """ include_dirs: if not empty, image must be inside one of these """
    """ exclude_dirs: image must not be inside any of these """
    if include_dirs and not any(
        directory_contains(d, image_directory) for d in include_dirs
    ):
        return False
    if exclude_dirs and any(
        directory_contains(d, image_directory) for d in exclude_dirs
    ):
        return False
    return True


def backup_path(path):
    """ return path of the backup copy for path: dir/_filename.ext """
    dirname, basename = os.path.split(path)
    return os.path.join(dirname, _BACKUP_PREFIX + basename)


def backup_file(path):
    """ copy path to its backup path, preserving file attributes """
    """ returns backup path, raises BackupCopyError on failure """
    dest = backup_path(path)
    try:
        shutil.copy2(path, dest)
    except OSError as e:
        raise BackupCopyError(f"Could not copy {path} to {dest}: {e.strerror or e}") from e
    return dest


def set_file_time(path, dt):
    """ set access and modification time of path to naive datetime dt """
    """ dt is taken as local time """
    """ raises TimestampUpdateError on failure """
    try:
        timestamp = dt.timestamp()
        os.utime(path, (timestamp, timestamp))
    except (OSError, OverflowError, ValueError) as e:
        raise TimestampUpdateError(f"Could not utime {path}: {e}") from e
