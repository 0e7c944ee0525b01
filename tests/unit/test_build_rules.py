"""
Unit tests for the build reconciliation rules in builds.service.
"""
import pytest

from builds import service
from builds.schemas import ModIn
from core.errors import ValidationError


def _mods(*flags, image_urls=None):
    image_urls = image_urls or [None] * len(flags)
    return [
        ModIn(main="Engine", name=f"mod{i}", hasImage=flag, image_url=url)
        for i, (flag, url) in enumerate(zip(flags, image_urls))
    ]


class TestMergeCovers:
    def test_kept_then_uploaded(self):
        assert service.merge_covers(["/uploads/k1"], ["/uploads/n1"]) == ("/uploads/k1", "/uploads/n1")

    def test_extra_covers_are_dropped(self):
        covers = service.merge_covers(["/uploads/k1", "/uploads/k2"], ["/uploads/n1"])
        assert covers == ("/uploads/k1", "/uploads/k2")

    def test_only_uploads(self):
        assert service.merge_covers([], ["/uploads/n1", "/uploads/n2", "/uploads/n3"]) == (
            "/uploads/n1",
            "/uploads/n2",
        )

    def test_nothing(self):
        assert service.merge_covers([], []) == (None, None)


class TestCreatePairing:
    def test_index_pairing(self):
        assert service.index_mod_images(3, ["/uploads/a", "/uploads/b"]) == [
            "/uploads/a",
            "/uploads/b",
            None,
        ]

    def test_extra_files_ignored(self):
        assert service.index_mod_images(1, ["/uploads/a", "/uploads/b"]) == ["/uploads/a"]


class TestUpdatePairing:
    def test_flagged_mods_consume_uploads_in_order(self):
        mods = _mods(True, False, True)
        assert service.pair_mod_images(mods, ["/uploads/a", "/uploads/b"]) == [
            "/uploads/a",
            None,
            "/uploads/b",
        ]

    def test_unflagged_mod_keeps_existing_image(self):
        mods = _mods(False, True, image_urls=["/uploads/old.jpg", "/uploads/ignored.jpg"])
        assert service.pair_mod_images(mods, ["/uploads/new.jpg"]) == [
            "/uploads/old.jpg",
            "/uploads/new.jpg",
        ]

    def test_flagged_mod_without_file_left_is_imageless(self):
        # Fewer uploads than flagged mods: trailing flagged entries get no image,
        # not their previous image and not an error.
        mods = _mods(True, True, True, image_urls=[None, None, "/uploads/old.jpg"])
        assert service.pair_mod_images(mods, ["/uploads/a"]) == ["/uploads/a", None, None]

    def test_more_files_than_flagged_mods(self):
        mods = _mods(True)
        assert service.pair_mod_images(mods, ["/uploads/a", "/uploads/b"]) == ["/uploads/a"]


class TestParsing:
    def test_mods_json_parsed_with_aliases(self):
        mods = service.parse_mods('[{"main": "Wheels", "sub": "Rims", "name": "TE37", "hasImage": true}]')
        assert mods[0].main == "Wheels"
        assert mods[0].has_image is True

    @pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', "[1, 2]"])
    def test_bad_mods_payload(self, raw):
        with pytest.raises(ValidationError):
            service.parse_mods(raw)

    def test_empty_mods_payload(self):
        assert service.parse_mods(None) == []
        assert service.parse_mods("") == []

    def test_url_list_must_hold_strings(self):
        with pytest.raises(ValidationError):
            service.parse_url_list("[1]", field_name="keepGallery")

    def test_mod_rows_fill_defaults(self):
        rows = service.build_mod_rows([ModIn(name="Intake")], ["/uploads/x"])
        assert rows[0].category == ""
        assert rows[0].sub_category is None
        assert rows[0].mod_note is None
        assert rows[0].image_url == "/uploads/x"


class TestFieldValidation:
    def test_ownership_normalized(self):
        fields = service.validate_fields(
            ownership=" Previous ", car_name="S14", model=None, body_style=None, description=None
        )
        assert fields.ownership == "previous"

    def test_unknown_ownership_rejected(self):
        with pytest.raises(ValidationError):
            service.validate_fields(
                ownership="sold", car_name="S14", model=None, body_style=None, description=None
            )
