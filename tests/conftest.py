"""Shared fixtures: an in-memory tag reader/writer and an AlbumData.xml builder."""

import os
from xml.sax.saxutils import escape

import pytest

from iphoto2exif.errors import TagWriteError


class FakeTags:
    """Stands in for ExifTool; records staged and written values."""

    def __init__(
        self,
        path,
        persons=None,
        keywords=None,
        comment=None,
        rating=None,
        location=(None, None),
        date="2010:07:04 13:05:09",
        write_error=None,
    ):
        self.path = path
        self.persons = list(persons or [])
        self.keywords = list(keywords or [])
        self.comment = comment
        self.rating = rating
        self.location = location
        self.date = date
        self.write_error = write_error
        self.staged = {}
        self.writes = []
        self.backup_existed_at_write = None
        self.read_called = False

    def read(self):
        self.read_called = True

    def get_persons(self):
        return list(self.persons)

    def get_keywords(self):
        return list(self.keywords)

    def get_comment(self):
        return self.comment

    def get_rating(self):
        return self.rating

    def get_location(self):
        return self.location

    def get_date_original(self):
        return self.date

    def set_persons(self, persons):
        self.staged["persons"] = list(persons)

    def set_keywords(self, keywords):
        self.staged["keywords"] = list(keywords)

    def set_comment(self, comment):
        self.staged["comment"] = comment

    def set_rating(self, rating):
        self.staged["rating"] = rating

    def set_location(self, latitude, longitude):
        self.staged["location"] = (latitude, longitude)

    def write(self):
        dirname, basename = os.path.split(self.path)
        self.backup_existed_at_write = os.path.exists(os.path.join(dirname, "_" + basename))
        if self.write_error:
            raise TagWriteError(self.write_error)
        self.writes.append(dict(self.staged))
        return bool(self.staged)


class FakeTagIO:
    """Factory handed to MetadataReconciler; keeps one FakeTags per path."""

    def __init__(self, **defaults):
        self.defaults = defaults
        self.per_path = {}
        self.instances = {}

    def configure(self, path, **values):
        self.per_path[str(path)] = values

    def __call__(self, path):
        values = dict(self.defaults)
        values.update(self.per_path.get(str(path), {}))
        tags = FakeTags(str(path), **values)
        self.instances[str(path)] = tags
        return tags


@pytest.fixture
def tagio():
    return FakeTagIO()


def plist_value(value):
    """Render a python value as a plist XML fragment."""
    if isinstance(value, bool):
        return "<true/>" if value else "<false/>"
    if isinstance(value, int):
        return f"<integer>{value}</integer>"
    if isinstance(value, float):
        return f"<real>{value}</real>"
    if isinstance(value, str):
        return f"<string>{escape(value)}</string>"
    if isinstance(value, list):
        return "<array>" + "".join(plist_value(v) for v in value) + "</array>"
    if isinstance(value, dict):
        items = "".join(
            f"\n\t<key>{escape(k)}</key>\n\t{plist_value(v)}" for k, v in value.items()
        )
        return f"<dict>{items}\n</dict>"
    raise TypeError(value)


def plist_document(root):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" '
        '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
        '<plist version="1.0">\n'
        f"{plist_value(root)}\n"
        "</plist>\n"
    )


@pytest.fixture
def write_catalog(tmp_path):
    """Write a catalog dict to AlbumData.xml and return its path."""

    def _write(root):
        path = tmp_path / "AlbumData.xml"
        path.write_text(plist_document(root), encoding="utf-8")
        return path

    return _write
