"""
Unit tests for core.uploads (avatar data URIs and file cleanup).
"""
import base64

from core import uploads

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def _data_uri(data: bytes = PNG_BYTES, ext: str = "png") -> str:
    return f"data:image/{ext};base64,{base64.b64encode(data).decode()}"


def test_save_avatar_writes_file(uploads_dir):
    url = uploads.save_avatar_data_uri(_data_uri(), user_id=7)
    assert url.startswith("/uploads/avatars/profilepics/avatar-7-")
    assert url.endswith(".png")
    path = uploads.path_for_url(url)
    assert path.read_bytes() == PNG_BYTES
    assert uploads_dir.resolve() in path.parents


def test_malformed_data_uri_returns_none(uploads_dir):
    assert uploads.save_avatar_data_uri("data:image/png;nope", user_id=7) is None


def test_remove_avatar_only_touches_avatar_folder(uploads_dir):
    url = uploads.save_avatar_data_uri(_data_uri(), user_id=7)
    assert uploads.remove_avatar(url) is True
    assert not uploads.path_for_url(url).exists()

    assert uploads.remove_avatar("/uploads/123-coverImages.jpg") is False
    assert uploads.remove_avatar("https://cdn.example.com/a.png") is False


def test_path_for_url_rejects_escape(uploads_dir):
    assert uploads.path_for_url("/uploads/../secrets.txt") is None
    assert uploads.path_for_url("/static/a.png") is None


def test_discard_removes_saved_files(uploads_dir):
    uploads_dir.mkdir(parents=True, exist_ok=True)
    (uploads_dir / "1-galleryImages.jpg").write_bytes(b"x")
    uploads.discard(["/uploads/1-galleryImages.jpg", "/uploads/missing.jpg"])
    assert not (uploads_dir / "1-galleryImages.jpg").exists()


def test_is_data_uri():
    assert uploads.is_data_uri(_data_uri()) is True
    assert uploads.is_data_uri("/uploads/a.png") is False
    assert uploads.is_data_uri(None) is False
