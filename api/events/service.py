"""
Event registration business logic.
"""

from __future__ import annotations

import logging

from core.errors import NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)

ALREADY_REGISTERED_MESSAGE = "This email is already registered for this event"


def registrant_name(first_name: str | None, last_name: str | None) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def split_name(name: str | None) -> tuple[str, str]:
    """
    Split a stored registrant name back into (first, last).
    Everything after the first space is the last name.
    """
    parts = (name or "").split(" ")
    first = parts[0]
    last = " ".join(parts[1:]) if len(parts) > 1 else ""
    return first, last


async def check_registration(payload: schemas.CheckRegistrationRequest) -> dict:
    registered = await repository.registration_exists(payload.event_id, payload.email)
    return {
        "registered": registered,
        "message": ALREADY_REGISTERED_MESSAGE if registered else "",
    }


async def register(payload: schemas.RegisterEventRequest) -> int:
    if not payload.user_id:
        raise ValidationError("User ID is missing. Cannot complete registration.")

    cars = [car.model_dump() for car in payload.cars]
    registration_id = await repository.insert_registration_with_cars(
        event_id=payload.event_id,
        user_id=payload.user_id,
        name=registrant_name(payload.first_name, payload.last_name),
        email=payload.email,
        phone=payload.phone,
        cars=cars,
    )
    logger.info(
        "registration_created registration_id=%s event_id=%s cars=%s",
        registration_id,
        payload.event_id,
        len(cars),
    )
    return registration_id


async def get_registration_details(event_id: int, *, user_id: int) -> dict:
    """
    The caller's own registration for an event, with its cars.

    Another user's registration is reported exactly like a missing one.
    """
    registration = await repository.get_registration_for_user(event_id, user_id=user_id)
    if registration is None:
        raise NotFoundError("No registration found for this event and user.")

    cars = await repository.list_cars(int(registration["id"]))
    first_name, last_name = split_name(registration.get("name"))
    return {
        **registration,
        "firstName": first_name,
        "lastName": last_name,
        "cars": [
            {
                "id": car["id"],
                "make": car["make"],
                "model": car["model"],
                "year": car["year"],
                "color": car["color"],
                "mileage": car["mileage"],
                "modified": car["modifications"],
            }
            for car in cars
        ],
    }


async def update_registration(
    registration_id: int,
    payload: schemas.UpdateRegistrationRequest,
    *,
    user_id: int,
) -> None:
    cars: list[dict] = []
    for car in payload.cars:
        if not car.is_complete():
            logger.warning(
                "registration_car_skipped registration_id=%s reason=missing_make_model_year",
                registration_id,
            )
            continue
        cars.append(car.model_dump())

    await repository.replace_registration(
        registration_id,
        user_id=user_id,
        name=registrant_name(payload.first_name, payload.last_name),
        email=payload.email,
        phone=payload.phone,
        cars=cars,
    )
    logger.info("registration_updated registration_id=%s cars=%s", registration_id, len(cars))


async def delete_registration(registration_id: int, *, user_id: int) -> None:
    await repository.delete_registration(registration_id, user_id=user_id)
    logger.info("registration_deleted registration_id=%s", registration_id)
