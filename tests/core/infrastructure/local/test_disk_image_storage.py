import re

import pytest

from core.infrastructure.local.disk_image_storage import DiskImageStorage, generate_filename
from core.models.image import EntityKind
from core.models.storage import CleanupStatus


@pytest.fixture
def disk_storage(tmp_path) -> DiskImageStorage:
    return DiskImageStorage(tmp_path / "uploads")


class TestGenerateFilename:
    @pytest.mark.parametrize(
        "kind, prefix",
        [(EntityKind.ANIMAL, "animal"), (EntityKind.EXHIBIT, "exhibit")],
    )
    def test_prefix_follows_kind(self, kind, prefix) -> None:
        assert re.match(rf"^{prefix}-\d+-\d+\.png$", generate_filename(kind, ".png"))


class TestDiskImageStorage:
    def test_creates_kind_directories(self, disk_storage) -> None:
        assert (disk_storage.root / "animals").is_dir()
        assert (disk_storage.root / "exhibits").is_dir()

    def test_root_from_environment(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("IMAGE_UPLOAD_DIR", str(tmp_path / "env-uploads"))

        storage = DiskImageStorage()

        assert storage.root == tmp_path / "env-uploads"
        assert (tmp_path / "env-uploads" / "exhibits").is_dir()

    def test_upload_exhibit_lands_in_exhibit_folder(self, disk_storage) -> None:
        reference = disk_storage.upload(
            data=b"png-bytes",
            file_name="Hall.PNG",
            content_type="image/png",
            kind=EntityKind.EXHIBIT,
        )

        assert re.match(r"^exhibit-\d+-\d+\.png$", reference.url)
        assert reference.url == reference.key == reference.filename
        assert reference.folder == "exhibits"
        assert (disk_storage.root / "exhibits" / reference.url).read_bytes() == b"png-bytes"
        assert list((disk_storage.root / "animals").iterdir()) == []

    def test_upload_with_explicit_extension(self, disk_storage) -> None:
        reference = disk_storage.upload(
            data=b"webp",
            file_name="lion.jpg",
            content_type="image/webp",
            kind=EntityKind.ANIMAL,
            extension=".webp",
        )

        assert reference.url.startswith("animal-")
        assert reference.url.endswith(".webp")

    def test_upload_with_filename_override(self, disk_storage) -> None:
        reference = disk_storage.upload(
            data=b"thumb",
            file_name="lion.jpg",
            content_type="image/webp",
            kind=EntityKind.ANIMAL,
            filename="animal-1-2-thumb.webp",
        )

        assert reference.url == "animal-1-2-thumb.webp"
        assert (disk_storage.root / "animals" / "animal-1-2-thumb.webp").exists()

    def test_delete_by_filename(self, disk_storage) -> None:
        reference = disk_storage.upload(
            data=b"x", file_name="a.gif", content_type="image/gif", kind=EntityKind.EXHIBIT
        )

        result = disk_storage.delete(reference.url)

        assert result.status is CleanupStatus.DELETED
        assert not (disk_storage.root / "exhibits" / reference.url).exists()

    def test_delete_by_folder_and_filename(self, disk_storage) -> None:
        (disk_storage.root / "animals" / "custom.png").write_bytes(b"x")

        result = disk_storage.delete("animals/custom.png")

        assert result.status is CleanupStatus.DELETED
        assert not (disk_storage.root / "animals" / "custom.png").exists()

    @pytest.mark.parametrize("reference", [None, "", "animal-404-1.png", "exhibits/missing.png"])
    def test_delete_missing_is_noop(self, disk_storage, reference) -> None:
        result = disk_storage.delete(reference)

        assert result.status is CleanupStatus.NOT_FOUND
        assert result.succeeded

    def test_delete_unknown_folder_fails_softly(self, disk_storage) -> None:
        result = disk_storage.delete("reptiles/snake.png")

        assert result.status is CleanupStatus.FAILED
        assert result.reason

    def test_delete_image_file_ignores_empty_name(self, disk_storage) -> None:
        assert disk_storage.delete_image_file(EntityKind.ANIMAL, None) is False
        assert disk_storage.delete_image_file(EntityKind.ANIMAL, "") is False

    def test_delete_with_thumbnail_without_thumbnail(self, disk_storage) -> None:
        reference = disk_storage.upload(
            data=b"x", file_name="a.jpg", content_type="image/jpeg", kind=EntityKind.ANIMAL
        )

        results = disk_storage.delete_with_thumbnail(reference.url)

        assert [r.status for r in results] == [CleanupStatus.DELETED]
