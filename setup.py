#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# setup.py script for iphoto2exif
#

import os.path

from setuptools import setup

# read the contents of README file
this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

# read version from _version.py
about = {}
with open(
    os.path.join(this_directory, "iphoto2exif", "_version.py"),
    mode="r",
    encoding="utf-8",
) as f:
    exec(f.read(), about)

setup(
    name="iphoto2exif",
    version=about["__version__"],
    description="Write metadata from iPhoto's AlbumData.xml catalog (faces, keywords, comments, ratings, geo locations) to the EXIF/IPTC/XMP tags of the original photo files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["iphoto2exif"],
    license="License :: OSI Approved :: MIT License",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "License :: OSI Approved :: MIT License",
        "Operating System :: MacOS :: MacOS X",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.7",
    install_requires=["tqdm>=4.36.1"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["iphoto2exif=iphoto2exif.__main__:main"]},
)
