"""
Event and registration persistence.

A registration and its cars are one composite entity: they are created,
replaced and deleted together inside a single transaction.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db
from core.errors import (
    AlreadyRegistered,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ParentInsertFailed,
    ValidationError,
)

REGISTRATION_UNIQUE_CONSTRAINT = "event_registrations_event_id_email_unique"

_INSERT_CAR_SQL = """
    INSERT INTO registered_cars (registration_id, make, model, year, color, mileage, modifications)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
"""


def _car_records(registration_id: int, cars: list[dict[str, Any]]) -> list[tuple]:
    return [
        (
            registration_id,
            car.get("make"),
            car.get("model"),
            car.get("year"),
            car.get("color"),
            car.get("mileage"),
            car.get("modified"),
        )
        for car in cars
    ]


def _translate_unique_violation(exc: asyncpg.UniqueViolationError) -> ConflictError:
    if getattr(exc, "constraint_name", None) == REGISTRATION_UNIQUE_CONSTRAINT:
        return AlreadyRegistered()
    return ConflictError()


async def _lock_registration_owner(conn: asyncpg.Connection, registration_id: int, *, user_id: int) -> None:
    row = await conn.fetchrow(
        "SELECT user_id FROM event_registrations WHERE id = $1 FOR UPDATE",
        registration_id,
    )
    if row is None:
        raise NotFoundError("Registration not found.")
    if int(row["user_id"]) != user_id:
        raise AuthorizationError("You are not authorized to change this registration.")


async def list_events() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT *
        FROM events
        ORDER BY id
        """
    )


async def registration_exists(event_id: int, email: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM event_registrations
        WHERE event_id = $1
          AND email = $2
        LIMIT 1
        """,
        event_id,
        email,
    )
    return row is not None


async def insert_registration_with_cars(
    *,
    event_id: int,
    user_id: int,
    name: str,
    email: str,
    phone: str | None,
    cars: list[dict[str, Any]],
) -> int:
    """
    Insert a registration + its cars in a single transaction.

    Returns the registration id. A failing car insert rolls back the
    registration as well.
    """
    try:
        async with db.transaction() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO event_registrations (event_id, user_id, name, email, phone)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING id
                """,
                event_id,
                user_id,
                name,
                email,
                phone,
            )
            if row is None or row["id"] is None:
                raise ParentInsertFailed("Failed to create registration entry.")

            registration_id = int(row["id"])
            if cars:
                await conn.executemany(_INSERT_CAR_SQL, _car_records(registration_id, cars))
            return registration_id
    except asyncpg.UniqueViolationError as exc:
        raise _translate_unique_violation(exc) from exc
    except asyncpg.ForeignKeyViolationError as exc:
        raise ValidationError("Unknown event or user.") from exc


async def get_registration_for_user(event_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, event_id, user_id, name, email, phone
        FROM event_registrations
        WHERE event_id = $1
          AND user_id = $2
        LIMIT 1
        """,
        event_id,
        user_id,
    )


async def list_cars(registration_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, make, model, year, color, mileage, modifications
        FROM registered_cars
        WHERE registration_id = $1
        ORDER BY id
        """,
        registration_id,
    )


async def replace_registration(
    registration_id: int,
    *,
    user_id: int,
    name: str,
    email: str,
    phone: str,
    cars: list[dict[str, Any]],
) -> None:
    """
    Overwrite a registration's contact fields and replace its whole car set.
    """
    try:
        async with db.transaction() as conn:
            await _lock_registration_owner(conn, registration_id, user_id=user_id)
            await conn.execute(
                """
                UPDATE event_registrations
                SET name = $2,
                    email = $3,
                    phone = $4
                WHERE id = $1
                """,
                registration_id,
                name,
                email,
                phone,
            )
            await conn.execute(
                "DELETE FROM registered_cars WHERE registration_id = $1",
                registration_id,
            )
            if cars:
                await conn.executemany(_INSERT_CAR_SQL, _car_records(registration_id, cars))
    except asyncpg.UniqueViolationError as exc:
        raise _translate_unique_violation(exc) from exc


async def delete_registration(registration_id: int, *, user_id: int) -> None:
    async with db.transaction() as conn:
        await _lock_registration_owner(conn, registration_id, user_id=user_id)
        await conn.execute(
            "DELETE FROM registered_cars WHERE registration_id = $1",
            registration_id,
        )
        await conn.execute(
            "DELETE FROM event_registrations WHERE id = $1",
            registration_id,
        )
