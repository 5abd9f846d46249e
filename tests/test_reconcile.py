"""Tests for the per-image diff and the reconciliation run."""

import datetime
import logging
import os
import warnings

import pytest

from iphoto2exif import reconcile
from iphoto2exif.catalog import CatalogIndex, ImageRecord, load_catalog
from iphoto2exif.errors import TimestampUpdateError
from iphoto2exif.reconcile import (
    ImageState,
    MetadataReconciler,
    ReconciliationPlan,
    compute_plan,
    merge_names,
)

from conftest import FakeTags


def _image(tmp_path, name="IMG_01.JPG", subdir=None):
    directory = tmp_path / subdir if subdir else tmp_path
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(b"jpeg")
    return str(path)


def test_merge_names_is_idempotent() -> None:
    first, changed = merge_names(["Zoo", "Beach"], ["Family", "Beach"])
    assert first == ["Beach", "Family", "Zoo"]
    assert changed

    second, changed_again = merge_names(first, ["Family", "Beach"])
    assert second == first
    assert not changed_again


def test_plan_adds_new_persons_sorted() -> None:
    index = CatalogIndex(persons={"1": "Carol", "2": "Alice"})
    record = ImageRecord(image_id="1", path="/x.jpg", face_refs=["1", "2", "9"])
    tags = FakeTags("/x.jpg", persons=["Bob", "Alice"])

    plan = compute_plan(record, index, tags)

    assert plan.persons == ["Alice", "Bob", "Carol"]
    assert plan.dirty


def test_plan_leaves_persons_alone_when_all_present() -> None:
    index = CatalogIndex(persons={"1": "Alice"})
    record = ImageRecord(image_id="1", path="/x.jpg", face_refs=["1"])
    plan = compute_plan(record, index, FakeTags("/x.jpg", persons=["Alice"]))
    assert plan.persons is None
    assert not plan.dirty


def test_plan_merges_keywords() -> None:
    index = CatalogIndex(keywords={"1": "Summer", "2": "Family"})
    record = ImageRecord(image_id="1", path="/x.jpg", keyword_refs=["1", "2", "3"])
    plan = compute_plan(record, index, FakeTags("/x.jpg", keywords=["Summer"]))
    assert plan.keywords == ["Family", "Summer"]


def test_plan_comment_only_when_different() -> None:
    index = CatalogIndex()
    record = ImageRecord(image_id="1", path="/x.jpg", comment="At the lake")

    assert compute_plan(record, index, FakeTags("/x.jpg")).comment == "At the lake"
    same = FakeTags("/x.jpg", comment="At the lake")
    assert compute_plan(record, index, same).comment is None

    empty = ImageRecord(image_id="1", path="/x.jpg", comment="")
    assert compute_plan(empty, index, FakeTags("/x.jpg", comment="old")).comment is None


def test_plan_rating_only_when_positive_and_different() -> None:
    index = CatalogIndex()
    record = ImageRecord(image_id="1", path="/x.jpg", rating=3)

    assert compute_plan(record, index, FakeTags("/x.jpg")).rating == 3
    assert compute_plan(record, index, FakeTags("/x.jpg", rating=3.0)).rating is None

    unrated = ImageRecord(image_id="1", path="/x.jpg", rating=0)
    assert compute_plan(unrated, index, FakeTags("/x.jpg", rating=2)).rating is None


def test_plan_location_compares_rounded_coordinates() -> None:
    index = CatalogIndex()
    record = ImageRecord(image_id="1", path="/x.jpg", latitude=48.10001, longitude=11.6)

    assert compute_plan(record, index, FakeTags("/x.jpg")).location == (48.10001, 11.6)
    near = FakeTags("/x.jpg", location=(48.1, 11.6))
    assert compute_plan(record, index, near).location is None


def test_plan_location_requires_both_coordinates() -> None:
    record = ImageRecord(image_id="1", path="/x.jpg", latitude=48.1)
    assert compute_plan(record, CatalogIndex(), FakeTags("/x.jpg")).location is None


def test_plan_apply_stages_only_planned_tags() -> None:
    tags = FakeTags("/x.jpg")
    ReconciliationPlan(rating=5, location=(1.0, 2.0)).apply(tags)
    assert tags.staged == {"rating": 5, "location": (1.0, 2.0)}


def test_end_to_end_writes_rating_and_location_with_backup(
    tmp_path, write_catalog, tagio
) -> None:
    """A single catalog image gets its rating and location written after a backup copy."""
    image = _image(tmp_path)
    catalog = write_catalog(
        {
            "Master Image List": {
                "1": {
                    "ImagePath": image,
                    "Rating": 5,
                    "latitude": 48.1,
                    "longitude": 11.6,
                }
            }
        }
    )
    index = load_catalog(str(catalog))
    reconciler = MetadataReconciler(index, backup=True, changetime=False, tagio=tagio)

    summary = reconciler.run(noprogress=True)

    tags = tagio.instances[image]
    assert tags.writes == [{"rating": 5, "location": (48.1, 11.6)}]
    assert tags.backup_existed_at_write
    assert os.path.exists(os.path.join(str(tmp_path), "_IMG_01.JPG"))
    assert summary["processed"] == 1


def test_write_is_attempted_even_without_changes(tmp_path, tagio) -> None:
    image = _image(tmp_path)
    index = CatalogIndex(images=[ImageRecord(image_id="1", path=image)])
    reconciler = MetadataReconciler(index, changetime=False, tagio=tagio)

    result = reconciler.process(index.images[0])

    assert result.state is ImageState.DONE
    assert not result.plan.dirty
    assert tagio.instances[image].writes == [{}]
    assert not result.written


def test_changetime_sets_file_time_to_capture_date(tmp_path, tagio) -> None:
    image = _image(tmp_path)
    index = CatalogIndex(images=[ImageRecord(image_id="1", path=image)])
    reconciler = MetadataReconciler(index, tagio=tagio)

    reconciler.process(index.images[0])

    expected = datetime.datetime(2010, 7, 4, 13, 5, 9).timestamp()
    assert os.stat(image).st_mtime == pytest.approx(expected)


def test_date_failure_skips_writes_and_timestamp(tmp_path, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="iphoto2exif")
    image = _image(tmp_path)
    before = os.stat(image).st_mtime
    tagio = lambda path: FakeTags(path, date="not-a-date")  # noqa: E731
    record = ImageRecord(image_id="1", path=image, rating=5)
    reconciler = MetadataReconciler(CatalogIndex(images=[record]), tagio=tagio)

    result = reconciler.process(record)

    assert result.state is ImageState.DATE_FAILED
    assert result.plan is None
    assert os.stat(image).st_mtime == before
    assert "Could not parse date format not-a-date" in caplog.text


def test_write_failure_is_reported_and_run_continues(tmp_path, tagio) -> None:
    first = _image(tmp_path, "IMG_01.JPG")
    second = _image(tmp_path, "IMG_02.JPG")
    tagio.configure(first, write_error="Could not write to IMG_01.JPG: Not a valid JPG")
    records = [
        ImageRecord(image_id="1", path=first, rating=5),
        ImageRecord(image_id="2", path=second, rating=5),
    ]
    reconciler = MetadataReconciler(
        CatalogIndex(images=records), changetime=False, tagio=tagio
    )

    summary = reconciler.run(noprogress=True)

    assert summary["failed"] == 1
    assert summary["processed"] == 1
    assert tagio.instances[second].writes == [{"rating": 5}]


def test_filtered_and_missing_images_are_not_touched(tmp_path, tagio) -> None:
    inside = _image(tmp_path, subdir="keep")
    outside = _image(tmp_path, subdir="skip")
    records = [
        ImageRecord(image_id="1", path=inside),
        ImageRecord(image_id="2", path=outside),
        ImageRecord(image_id="3", path=str(tmp_path / "keep" / "gone.jpg")),
        ImageRecord(image_id="4", path=None),
    ]
    reconciler = MetadataReconciler(
        CatalogIndex(images=records),
        directories=[str(tmp_path / "keep")],
        changetime=False,
        tagio=tagio,
    )

    summary = reconciler.run(noprogress=True)

    assert set(tagio.instances) == {inside}
    assert summary == {"processed": 1, "filtered": 1, "missing": 2, "failed": 0}


def test_test_mode_does_not_modify_files(tmp_path, tagio) -> None:
    image = _image(tmp_path)
    before = os.stat(image).st_mtime
    record = ImageRecord(image_id="1", path=image, rating=5)
    reconciler = MetadataReconciler(
        CatalogIndex(images=[record]), backup=True, test=True, tagio=tagio
    )

    result = reconciler.process(record)

    assert result.plan.rating == 5
    assert tagio.instances[image].writes == []
    assert not os.path.exists(os.path.join(str(tmp_path), "_IMG_01.JPG"))
    assert os.stat(image).st_mtime == before


def test_warnings_during_run_go_to_the_logger(tmp_path, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="iphoto2exif")
    image = _image(tmp_path)

    class WarningTags(FakeTags):
        def read(self):
            warnings.warn("odd maker notes")

    record = ImageRecord(image_id="1", path=image)
    reconciler = MetadataReconciler(
        CatalogIndex(images=[record]), changetime=False, tagio=WarningTags
    )
    with warnings.catch_warnings():
        warnings.simplefilter("always")
        saved = warnings.showwarning
        reconciler.run(noprogress=True)
        assert warnings.showwarning is saved

    assert "odd maker notes" in caplog.text


def test_written_is_set_when_tags_were_flushed(tmp_path, tagio) -> None:
    image = _image(tmp_path)
    record = ImageRecord(image_id="1", path=image, rating=5)
    reconciler = MetadataReconciler(
        CatalogIndex(images=[record]), changetime=False, tagio=tagio
    )

    result = reconciler.process(record)

    assert result.written
    assert result.errors == []


def test_backup_failure_is_reported_and_tags_still_written(tmp_path, tagio) -> None:
    """A failed backup copy is an error for the image, the write still happens."""
    image = _image(tmp_path)
    # copy2 copies into a directory, so block the resulting target path too
    (tmp_path / "_IMG_01.JPG" / "IMG_01.JPG").mkdir(parents=True)
    record = ImageRecord(image_id="1", path=image, rating=5)
    reconciler = MetadataReconciler(
        CatalogIndex(images=[record]), backup=True, changetime=False, tagio=tagio
    )

    result = reconciler.process(record)

    assert tagio.instances[image].writes == [{"rating": 5}]
    assert result.written
    assert len(result.errors) == 1
    assert result.errors[0].startswith(f"Could not copy {image}")


def test_timestamp_failure_is_reported_and_run_continues(
    tmp_path, tagio, monkeypatch
) -> None:
    first = _image(tmp_path, "IMG_01.JPG")
    second = _image(tmp_path, "IMG_02.JPG")
    touched = []

    def set_file_time(path, date):
        if path == first:
            raise TimestampUpdateError(f"Could not utime {path}: Operation not permitted")
        touched.append(path)

    monkeypatch.setattr(reconcile, "set_file_time", set_file_time)
    records = [
        ImageRecord(image_id="1", path=first, rating=5),
        ImageRecord(image_id="2", path=second, rating=5),
    ]
    reconciler = MetadataReconciler(CatalogIndex(images=records), tagio=tagio)

    summary = reconciler.run(noprogress=True)

    assert touched == [second]
    assert tagio.instances[first].writes == [{"rating": 5}]
    assert tagio.instances[second].writes == [{"rating": 5}]
    assert summary["failed"] == 1
    assert summary["processed"] == 1


def test_missing_photo_is_logged_as_plain_warning(tmp_path, tagio, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="iphoto2exif")
    gone = str(tmp_path / "gone.jpg")
    reconciler = MetadataReconciler(CatalogIndex(), tagio=tagio)

    result = reconciler.process(ImageRecord(image_id="1", path=gone))

    assert result.state is ImageState.MISSING
    [record] = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert record.getMessage() == f"Skipping missing photo {gone}"
