import json

import asyncpg
import pytest

from builds import repository as builds_repository

pytestmark = pytest.mark.asyncio


class BuildTables:
    """
    Just enough of builds/build_gallery/build_mods to check reconciliation
    outcomes through the fake pool.
    """

    def __init__(self, *, owner_id=1, gallery=(), mods=(), fail_on=None):
        self.owner_id = owner_id
        self.gallery = list(gallery)
        self.mods = list(mods)
        self.build_row = None
        self.fail_on = fail_on

    def __call__(self, method, sql, args):
        if self.fail_on and self.fail_on in sql:
            raise asyncpg.NotNullViolationError("null value in column")
        if sql.startswith("SELECT user_id FROM builds"):
            return None if self.owner_id is None else {"user_id": self.owner_id}
        if sql.startswith("INSERT INTO builds"):
            self.build_row = args
            return {"id": 5}
        if sql.startswith("UPDATE builds"):
            self.build_row = args
            return "UPDATE 1"
        if sql.startswith("DELETE FROM build_gallery WHERE build_id = $1 AND NOT"):
            keep = args[1]
            before = len(self.gallery)
            self.gallery = [url for url in self.gallery if url in keep]
            return f"DELETE {before - len(self.gallery)}"
        if sql.startswith("INSERT INTO build_gallery"):
            self.gallery.extend(record[1] for record in args)
            return None
        if sql == "DELETE FROM build_mods WHERE build_id = $1":
            count = len(self.mods)
            self.mods = []
            return f"DELETE {count}"
        if sql.startswith("INSERT INTO build_mods"):
            self.mods.extend(args)
            return None
        return None


def _file(field, name, content=b"img"):
    return (field, (name, content, "image/jpeg"))


def _update_form(**overrides):
    form = {
        "ownership": "current",
        "car_name": "S14 Kouki",
        "model": "240SX",
        "description": "street build",
        "bodyStyle": "coupe",
        "mods": "[]",
        "keepCovers": "[]",
        "keepGallery": "[]",
    }
    form.update(overrides)
    return form


def _saved_files(uploads_dir):
    return sorted(p.name for p in uploads_dir.glob("*")) if uploads_dir.exists() else []


async def test_create_build_with_children(client, auth_headers, fake_pool, uploads_dir):
    tables = BuildTables()
    fake_pool.conn.handler = tables
    mods = [
        {"main": "Engine", "sub": "Turbo", "name": "GT2871", "details": "0.64 A/R"},
        {"main": "Wheels", "name": "TE37"},
        {"main": "Suspension", "name": "Coilovers"},
    ]

    resp = await client.post(
        "/api/builds",
        data={"car_name": "S14", "model": "240SX", "ownership": "current", "mods": json.dumps(mods)},
        files=[
            _file("coverImages", "c1.jpg"),
            _file("coverImages", "c2.jpg"),
            _file("galleryImages", "g1.png"),
            _file("galleryImages", "g2.png"),
            _file("modImages", "m1.jpg"),
            _file("modImages", "m2.jpg"),
        ],
        headers=auth_headers(1),
    )

    assert resp.status_code == 201
    assert resp.json() == {"success": True, "buildId": 5}
    assert fake_pool.conn.events == ["begin", "commit"]

    user_id, ownership, car_name, model, _description, _body, cover1, cover2 = tables.build_row
    assert (user_id, ownership, car_name, model) == (1, "current", "S14", "240SX")
    assert cover1.startswith("/uploads/") and cover1.endswith("-coverImages.jpg")
    assert cover2.startswith("/uploads/") and cover2 != cover1

    assert len(tables.gallery) == 2
    assert all(url.endswith(".png") for url in tables.gallery)

    # Create pairs mod i with uploaded mod file i; the third mod has none.
    assert [record[3] for record in tables.mods] == ["GT2871", "TE37", "Coilovers"]
    images = [record[4] for record in tables.mods]
    assert images[0].endswith("-modImages.jpg")
    assert images[1].endswith("-modImages.jpg")
    assert images[2] is None
    assert tables.mods[0][2] == "Turbo"
    assert tables.mods[0][5] == "0.64 A/R"

    assert len(_saved_files(uploads_dir)) == 6


async def test_create_build_requires_session(client, fake_pool):
    resp = await client.post("/api/builds", data={"car_name": "S14"})
    assert resp.status_code == 401
    assert fake_pool.conn.calls == []


async def test_create_build_rejects_bad_mods_json(client, auth_headers, fake_pool, uploads_dir):
    resp = await client.post(
        "/api/builds",
        data={"car_name": "S14", "mods": "{oops"},
        files=[_file("coverImages", "c1.jpg")],
        headers=auth_headers(1),
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"
    assert fake_pool.conn.calls == []
    assert _saved_files(uploads_dir) == []


async def test_create_build_rejects_unknown_ownership(client, auth_headers, fake_pool):
    resp = await client.post(
        "/api/builds",
        data={"car_name": "S14", "ownership": "sold"},
        headers=auth_headers(1),
    )
    assert resp.status_code == 400
    assert fake_pool.conn.calls == []


async def test_create_build_rejects_too_many_covers(client, auth_headers, fake_pool):
    resp = await client.post(
        "/api/builds",
        data={"car_name": "S14"},
        files=[_file("coverImages", f"c{i}.jpg") for i in range(3)],
        headers=auth_headers(1),
    )
    assert resp.status_code == 400
    assert fake_pool.conn.calls == []


async def test_failed_create_rolls_back_and_discards_files(client, auth_headers, fake_pool, uploads_dir):
    tables = BuildTables(fail_on="INSERT INTO build_mods")
    fake_pool.conn.handler = tables

    resp = await client.post(
        "/api/builds",
        data={"car_name": "S14", "mods": json.dumps([{"main": "Engine", "name": "Turbo"}])},
        files=[_file("galleryImages", "g1.png"), _file("modImages", "m1.jpg")],
        headers=auth_headers(1),
    )

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "code": "STORE_ERROR", "message": "Server error."}
    assert fake_pool.conn.events == ["begin", "rollback"]
    assert fake_pool.acquired == fake_pool.released == 1
    assert _saved_files(uploads_dir) == []


async def test_update_reconciles_covers_gallery_and_mods(client, auth_headers, fake_pool):
    tables = BuildTables(
        gallery=["/uploads/A.jpg", "/uploads/B.jpg", "/uploads/C.jpg"],
        mods=[(5, "Old", None, f"old{i}", None, None) for i in range(5)],
    )
    fake_pool.conn.handler = tables
    mods = [
        {"main": "Engine", "name": "Turbo", "hasImage": True},
        {"main": "Wheels", "name": "TE37", "hasImage": False, "image_url": "/uploads/te37.jpg"},
    ]

    resp = await client.put(
        "/api/builds/5",
        data=_update_form(
            keepCovers=json.dumps(["/uploads/cover-kept.jpg"]),
            keepGallery=json.dumps(["/uploads/B.jpg"]),
            mods=json.dumps(mods),
        ),
        files=[
            _file("coverImages", "n1.jpg"),
            _file("coverImages", "n2.jpg"),
            _file("galleryImages", "g-new.jpg"),
            _file("modImages", "turbo.jpg"),
        ],
        headers=auth_headers(1),
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert fake_pool.conn.events == ["begin", "commit"]

    _build_id, ownership, car_name, model, body, description, cover1, cover2 = tables.build_row
    assert (ownership, car_name, model, body, description) == (
        "current",
        "S14 Kouki",
        "240SX",
        "coupe",
        "street build",
    )
    # Kept cover first, then the first new upload; the second upload is dropped.
    assert cover1 == "/uploads/cover-kept.jpg"
    assert cover2.endswith("-coverImages.jpg")

    assert tables.gallery[0] == "/uploads/B.jpg"
    assert len(tables.gallery) == 2
    assert tables.gallery[1].endswith("-galleryImages.jpg")

    assert len(tables.mods) == 2
    assert tables.mods[0][4].endswith("-modImages.jpg")
    assert tables.mods[1][4] == "/uploads/te37.jpg"


@pytest.mark.parametrize("mod_count", [0, 1, 3, 7])
async def test_update_leaves_exactly_m_mods(client, auth_headers, fake_pool, mod_count):
    tables = BuildTables(mods=[(5, "Old", None, f"old{i}", None, None) for i in range(4)])
    fake_pool.conn.handler = tables
    mods = [{"main": "Misc", "name": f"mod{i}"} for i in range(mod_count)]

    resp = await client.put(
        "/api/builds/5",
        data=_update_form(mods=json.dumps(mods)),
        headers=auth_headers(1),
    )

    assert resp.status_code == 200
    assert [record[3] for record in tables.mods] == [f"mod{i}" for i in range(mod_count)]


async def test_update_with_empty_keep_gallery_deletes_all(client, auth_headers, fake_pool):
    tables = BuildTables(gallery=["/uploads/A.jpg", "/uploads/B.jpg"])
    fake_pool.conn.handler = tables

    resp = await client.put("/api/builds/5", data=_update_form(), headers=auth_headers(1))

    assert resp.status_code == 200
    assert tables.gallery == []


async def test_update_flagged_mods_beyond_uploads_are_imageless(client, auth_headers, fake_pool):
    tables = BuildTables()
    fake_pool.conn.handler = tables
    mods = [
        {"main": "A", "name": "first", "hasImage": True},
        {"main": "B", "name": "second", "hasImage": True, "image_url": "/uploads/old.jpg"},
    ]

    resp = await client.put(
        "/api/builds/5",
        data=_update_form(mods=json.dumps(mods)),
        files=[_file("modImages", "only.jpg")],
        headers=auth_headers(1),
    )

    assert resp.status_code == 200
    assert tables.mods[0][4].endswith("-modImages.jpg")
    assert tables.mods[1][4] is None


async def test_update_by_non_owner_is_forbidden(client, auth_headers, fake_pool, uploads_dir):
    tables = BuildTables(owner_id=1, gallery=["/uploads/A.jpg"])
    fake_pool.conn.handler = tables

    resp = await client.put(
        "/api/builds/5",
        data=_update_form(),
        files=[_file("galleryImages", "g.jpg")],
        headers=auth_headers(2),
    )

    assert resp.status_code == 403
    assert fake_pool.conn.statements() == ["SELECT user_id FROM builds WHERE id = $1 FOR UPDATE"]
    assert fake_pool.conn.events == ["begin", "rollback"]
    assert tables.gallery == ["/uploads/A.jpg"]
    assert _saved_files(uploads_dir) == []


async def test_update_missing_build(client, auth_headers, fake_pool):
    fake_pool.conn.handler = BuildTables(owner_id=None)
    resp = await client.put("/api/builds/404", data=_update_form(), headers=auth_headers(1))
    assert resp.status_code == 404


async def test_delete_removes_children_first(client, auth_headers, fake_pool):
    fake_pool.conn.handler = BuildTables(owner_id=1)

    resp = await client.delete("/api/builds/5", headers=auth_headers(1))

    assert resp.status_code == 200
    assert fake_pool.conn.statements() == [
        "SELECT user_id FROM builds WHERE id = $1 FOR UPDATE",
        "DELETE FROM build_mods WHERE build_id = $1",
        "DELETE FROM build_gallery WHERE build_id = $1",
        "DELETE FROM builds WHERE id = $1",
    ]
    assert fake_pool.conn.events == ["begin", "commit"]


async def test_delete_by_non_owner_is_forbidden(client, auth_headers, fake_pool):
    fake_pool.conn.handler = BuildTables(owner_id=1)

    resp = await client.delete("/api/builds/5", headers=auth_headers(3))

    assert resp.status_code == 403
    assert len(fake_pool.conn.calls) == 1


@pytest.fixture
def stored_build(monkeypatch):
    async def get_build(build_id):
        if build_id != 5:
            return None
        return {
            "id": 5,
            "user_id": 1,
            "owner_username": "driver",
            "ownership": "current",
            "car_name": "S14",
            "model": "240SX",
            "description": None,
            "body_style": "coupe",
            "cover_image": "/uploads/c1.jpg",
            "cover_image2": None,
        }

    async def list_gallery(build_id):
        return ["/uploads/g1.jpg"]

    async def list_mods(build_id):
        return [{"id": 1, "category": "Engine", "sub_category": None, "mod_name": "Turbo", "image_url": None, "mod_note": None}]

    monkeypatch.setattr(builds_repository, "get_build", get_build)
    monkeypatch.setattr(builds_repository, "list_gallery", list_gallery)
    monkeypatch.setattr(builds_repository, "list_mods", list_mods)


async def test_get_build_is_owner_flag(client, auth_headers, stored_build):
    owner = await client.get("/api/builds/5", headers=auth_headers(1))
    other = await client.get("/api/builds/5", headers=auth_headers(2))
    anonymous = await client.get("/api/builds/5")

    assert owner.json()["isOwner"] is True
    assert other.json()["isOwner"] is False
    assert anonymous.json()["isOwner"] is False
    # Same data regardless of viewer.
    assert owner.json()["build"] == other.json()["build"] == anonymous.json()["build"]

    build = owner.json()["build"]
    assert build["coverImages"] == ["/uploads/c1.jpg"]
    assert build["galleryImages"] == ["/uploads/g1.jpg"]
    assert build["bodyStyle"] == "coupe"
    assert owner.json()["mods"][0]["mod_name"] == "Turbo"


async def test_get_missing_build(client, stored_build):
    resp = await client.get("/api/builds/6")
    assert resp.status_code == 404


async def test_list_builds_splits_by_ownership(client, auth_headers, monkeypatch):
    calls = []

    async def list_builds(user_id, *, ownership_status):
        calls.append((user_id, ownership_status))
        return [{"id": 1 if ownership_status == "current" else 2}]

    monkeypatch.setattr(builds_repository, "list_builds", list_builds)

    own = await client.get("/api/builds", headers=auth_headers(4))
    assert own.json() == {"success": True, "currentBuilds": [{"id": 1}], "previousBuilds": [{"id": 2}]}
    assert calls == [(4, "current"), (4, "previous")]

    other = await client.get("/api/builds", params={"userId": 9})
    assert other.status_code == 200
    assert calls[-1] == (9, "previous")

    nobody = await client.get("/api/builds")
    assert nobody.status_code == 400
