"""
Build persistence.

A build row, its gallery rows and its mod rows form one composite entity.
Every write runs in a single transaction; update and delete lock the build
row (`FOR UPDATE`) before checking ownership so concurrent writers serialize.
"""

from __future__ import annotations

import asyncpg

from core import db
from core.errors import AuthorizationError, NotFoundError, ParentInsertFailed

from .schemas import BuildFields, ModRow

_INSERT_GALLERY_SQL = "INSERT INTO build_gallery (build_id, image_url) VALUES ($1, $2)"

_INSERT_MOD_SQL = """
    INSERT INTO build_mods (build_id, category, sub_category, mod_name, image_url, mod_note)
    VALUES ($1, $2, $3, $4, $5, $6)
"""


def _mod_records(build_id: int, mods: list[ModRow]) -> list[tuple]:
    return [
        (build_id, mod.category, mod.sub_category, mod.mod_name, mod.image_url, mod.mod_note)
        for mod in mods
    ]


async def _lock_build_owner(conn: asyncpg.Connection, build_id: int, *, user_id: int) -> None:
    row = await conn.fetchrow(
        "SELECT user_id FROM builds WHERE id = $1 FOR UPDATE",
        build_id,
    )
    if row is None:
        raise NotFoundError("Build not found.")
    if int(row["user_id"]) != user_id:
        raise AuthorizationError("Unauthorized")


async def list_builds(user_id: int, *, ownership_status: str) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, car_name, cover_image, ownership_status, model, body_style, description
        FROM builds
        WHERE user_id = $1
          AND ownership_status = $2
        ORDER BY id DESC
        """,
        user_id,
        ownership_status,
    )


async def get_build(build_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT
          b.id, b.user_id, b.ownership_status AS ownership, b.car_name, b.model,
          b.description, b.body_style, b.cover_image, b.cover_image2,
          u.username AS owner_username
        FROM builds b
        JOIN users u ON b.user_id = u.id
        WHERE b.id = $1
        """,
        build_id,
    )


async def list_gallery(build_id: int) -> list[str]:
    rows = await db.fetch_all(
        """
        SELECT image_url
        FROM build_gallery
        WHERE build_id = $1
        ORDER BY id
        """,
        build_id,
    )
    return [str(row["image_url"]) for row in rows]


async def list_mods(build_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, category, sub_category, mod_name, image_url, mod_note
        FROM build_mods
        WHERE build_id = $1
        ORDER BY id
        """,
        build_id,
    )


async def insert_build(
    *,
    user_id: int,
    fields: BuildFields,
    covers: tuple[str | None, str | None],
    gallery: list[str],
    mods: list[ModRow],
) -> int:
    """
    Insert a build + gallery + mods in a single transaction. Returns the build id.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO builds
              (user_id, ownership_status, car_name, model,
               description, body_style, cover_image, cover_image2)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING id
            """,
            user_id,
            fields.ownership,
            fields.car_name,
            fields.model,
            fields.description,
            fields.body_style,
            covers[0],
            covers[1],
        )
        if row is None or row["id"] is None:
            raise ParentInsertFailed("Failed to create build.")

        build_id = int(row["id"])
        if gallery:
            await conn.executemany(_INSERT_GALLERY_SQL, [(build_id, url) for url in gallery])
        if mods:
            await conn.executemany(_INSERT_MOD_SQL, _mod_records(build_id, mods))
        return build_id


async def reconcile_build(
    build_id: int,
    *,
    user_id: int,
    fields: BuildFields,
    covers: tuple[str | None, str | None],
    keep_gallery: list[str],
    new_gallery: list[str],
    mods: list[ModRow],
) -> None:
    """
    Bring a build and its children in line with the caller's full description.

    - scalar fields and both cover slots are overwritten
    - gallery rows not in `keep_gallery` are deleted (empty list deletes all),
      then `new_gallery` rows are appended
    - all mod rows are replaced by `mods`, in order
    """
    async with db.transaction() as conn:
        await _lock_build_owner(conn, build_id, user_id=user_id)

        await conn.execute(
            """
            UPDATE builds
            SET ownership_status = $2,
                car_name = $3,
                model = $4,
                body_style = $5,
                description = $6,
                cover_image = $7,
                cover_image2 = $8
            WHERE id = $1
            """,
            build_id,
            fields.ownership,
            fields.car_name,
            fields.model,
            fields.body_style,
            fields.description,
            covers[0],
            covers[1],
        )

        await conn.execute(
            """
            DELETE FROM build_gallery
            WHERE build_id = $1
              AND NOT (image_url = ANY($2::text[]))
            """,
            build_id,
            keep_gallery,
        )
        if new_gallery:
            await conn.executemany(_INSERT_GALLERY_SQL, [(build_id, url) for url in new_gallery])

        await conn.execute("DELETE FROM build_mods WHERE build_id = $1", build_id)
        if mods:
            await conn.executemany(_INSERT_MOD_SQL, _mod_records(build_id, mods))


async def delete_build(build_id: int, *, user_id: int) -> None:
    """
    Delete a build; mods and gallery rows go first, the build row last.
    """
    async with db.transaction() as conn:
        await _lock_build_owner(conn, build_id, user_id=user_id)
        await conn.execute("DELETE FROM build_mods WHERE build_id = $1", build_id)
        await conn.execute("DELETE FROM build_gallery WHERE build_id = $1", build_id)
        await conn.execute("DELETE FROM builds WHERE id = $1", build_id)
