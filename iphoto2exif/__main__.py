#!/usr/bin/env python3

# iphoto2exif
#
# This script will extract known metadata from iPhoto's AlbumData.xml catalog
# and write this metadata to EXIF/IPTC/XMP fields in the original photo file
# For example: iPhoto knows about Faces (PersonInImage) but does not
# store this data in the photo file itself

# Metadata currently extracted and where it is placed:
# iPhoto Faces --> XMP:PersonInImage
# iPhoto keywords --> IPTC:Keywords
# iPhoto comment --> EXIF:UserComment
# iPhoto rating --> XMP:Rating
# iPhoto latitude/longitude --> GPSLatitude, GPSLongitude

# comment, rating and location are overwritten in the destination file
# faces and keywords are merged with any data found in destination file (removing duplicates)

# Dependencies:
#   exiftool by Phil Harvey:
#       https://exiftool.org/

import argparse
import sys
from dataclasses import dataclass, field
from typing import List

from ._constants import _IPHOTO_ALBUM
from ._logging import LogLevel, setup_logging
from ._version import __version__
from .catalog import load_catalog
from .errors import CatalogParseError
from .exiftool import get_exiftool_path
from .reconcile import MetadataReconciler


@dataclass
class Config:
    """ settings for a run of iphoto2exif """

    catalog_path: str = _IPHOTO_ALBUM
    directories: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    log_level: str = LogLevel.info.name
    changetime: bool = True
    backup: bool = False
    test: bool = False
    noprogress: bool = False

    @classmethod
    def from_args(cls, args):
        return cls(
            catalog_path=args.iphoto_album,
            directories=args.directory or [],
            excludes=args.exclude or [],
            log_level=args.loglevel,
            changetime=args.changetime,
            backup=args.backup,
            test=args.test,
            noprogress=args.noprogress,
        )


# custom argparse class to show help if error triggered
class MyParser(argparse.ArgumentParser):
    def error(self, message):
        sys.stderr.write("error: %s\n" % message)
        self.print_help()
        sys.exit(2)


def process_arguments(argv=None):
    """ Process command line args, returns args in args """

    parser = MyParser(
        prog="iphoto2exif",
        description="Write iPhoto metadata (faces, keywords, comments, ratings, "
        "geo locations) to the EXIF/IPTC/XMP tags of the original photos",
    )
    parser.add_argument(
        "--iphoto-album",
        default=_IPHOTO_ALBUM,
        help=f"Path to iPhoto library AlbumData.xml [Default: {_IPHOTO_ALBUM}]",
    )
    parser.add_argument(
        "--directory",
        action="append",
        help="Limit operation to given directories [Multiple; Default: All]",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        help="Exclude given directories [Multiple; Default: None]",
    )
    parser.add_argument(
        "--loglevel",
        choices=LogLevel.names(),
        default=LogLevel.info.name,
        help=f"Log level [Values: {','.join(LogLevel.names())}; Default: info]",
    )
    parser.add_argument(
        "--no-changetime",
        dest="changetime",
        action="store_false",
        default=True,
        help="Do not change file time according to exif timestamps",
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        default=False,
        help="Backup files to _filename.ext before modifying them [Default: false]",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        default=False,
        help="list files to be updated but do not actually update meta data; "
        "most useful with --loglevel=debug",
    )
    parser.add_argument(
        "--noprogress",
        action="store_true",
        default=False,
        help="do not show progress bar",
    )
    parser.add_argument(
        "--list",
        action="append",
        choices=["keyword", "person"],
        help="list keywords or persons found in the catalog then exit: "
        "--list=keyword, --list=person",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=False,
        help="Do not prompt before processing",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"Version: {__version__}",
        help="show version number and exit",
    )

    return parser.parse_args(argv)


def list_catalog(index, what):
    """ print keywords and/or persons with their photo count """
    if "keyword" in what:
        print("Keywords/tags (photo count): ")
        for keyword, count in index.keywords_as_dict().items():
            print(f"\t{keyword} ({count})")
        print("-" * 60)

    if "person" in what:
        print("Persons (photo count): ")
        for person, count in index.persons_as_dict().items():
            print(f"\t{person} ({count})")
        print("-" * 60)


def confirm():
    """ prompt user to continue, return True if user typed Y """
    print("Caution: This script will modify the original photos of your iPhoto library")
    print("Use this script at your own risk; consider using --backup")
    ans = input("Type 'Y' to continue: ")
    return ans.upper() == "Y"


def run(config, tagio=None):
    """ read the catalog and reconcile every image, returns exit status """
    logger = setup_logging(config.log_level)

    try:
        index = load_catalog(config.catalog_path)
    except CatalogParseError as e:
        logger.error(str(e))
        return 1

    kwargs = {}
    if tagio is not None:
        kwargs["tagio"] = tagio
    reconciler = MetadataReconciler(
        index,
        directories=config.directories,
        excludes=config.excludes,
        changetime=config.changetime,
        backup=config.backup,
        test=config.test,
        logger=logger,
        **kwargs,
    )
    reconciler.run(noprogress=config.noprogress)
    return 0


def main(argv=None):
    """ main function for the script """
    """ processes arguments, loads the iPhoto catalog, """
    """ then processes each photo """

    args = process_arguments(argv)
    config = Config.from_args(args)

    if args.list:
        setup_logging(config.log_level)
        try:
            index = load_catalog(config.catalog_path)
        except CatalogParseError as e:
            sys.exit(str(e))
        list_catalog(index, args.list)
        sys.exit(0)

    if not (args.force or args.test) and not confirm():
        sys.exit(0)

    # fail early if exiftool isn't installed
    get_exiftool_path()

    sys.exit(run(config))


if __name__ == "__main__":
    main()
