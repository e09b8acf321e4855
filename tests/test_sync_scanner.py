"""Tests for media directory scanning."""

import pytest

from storysync.sync.scanner import LocalFile, MediaScanner, mime_type_for


class TestMediaScanner:
    """Tests for MediaScanner.scan."""

    def test_filters_to_image_extensions(self, media_dir):
        """Test that only jpg/jpeg/png/gif files are returned."""
        for name in ["a.jpg", "b.jpeg", "c.png", "d.gif", "e.webp", "f.txt", "g"]:
            (media_dir / name).write_bytes(b"x")

        names = sorted(f.name for f in MediaScanner().scan(media_dir))

        assert names == ["a.jpg", "b.jpeg", "c.png", "d.gif"]

    def test_skips_directories_and_dot_files(self, media_dir):
        """Test that subdirectories and hidden files are ignored."""
        (media_dir / "nested.png").mkdir()
        (media_dir / ".hidden.png").write_bytes(b"x")
        (media_dir / "ok.png").write_bytes(b"x")

        assert [f.name for f in MediaScanner().scan(media_dir)] == ["ok.png"]

    def test_local_file_metadata(self, media_dir):
        """Test size and MIME hint of scanned files."""
        (media_dir / "photo.JPG").write_bytes(b"12345")

        (local_file,) = MediaScanner().scan(media_dir)

        assert local_file.size == 5
        assert local_file.mime_hint == "image/jpeg"
        assert local_file.path.is_absolute()

    def test_missing_directory(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            MediaScanner().scan(temp_dir / "missing")

    def test_path_is_a_file(self, temp_dir):
        path = temp_dir / "file.png"
        path.write_bytes(b"x")
        with pytest.raises(NotADirectoryError):
            MediaScanner().scan(path)


class TestLocalFile:
    """Tests for LocalFile construction."""

    def test_unsupported_extension(self, temp_dir):
        path = temp_dir / "doc.pdf"
        path.write_bytes(b"x")
        with pytest.raises(ValueError, match="Unsupported"):
            LocalFile.from_path(path)

    def test_mime_type_for(self, temp_dir):
        assert mime_type_for(temp_dir / "a.gif") == "image/gif"
        assert mime_type_for(temp_dir / "a.svg") is None
