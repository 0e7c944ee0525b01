"""
Event and registration API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from auth.security import Principal

from . import repository, schemas, service

router = APIRouter()


@router.get("/events")
async def list_events(
    _: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    events = await repository.list_events()
    return {"success": True, "events": events}


@router.post("/check-registration")
async def check_registration(payload: schemas.CheckRegistrationRequest) -> dict:
    return await service.check_registration(payload)


@router.post("/register-event")
async def register_event(payload: schemas.RegisterEventRequest) -> dict:
    """
    Register for an event together with any number of cars, atomically.
    """
    registration_id = await service.register(payload)
    return {
        "success": True,
        "message": "Registration successful!",
        "registrationId": registration_id,
    }


@router.get("/get-registration-details")
async def get_registration_details(
    event_id: int = Query(..., alias="eventId"),
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    details = await service.get_registration_details(event_id, user_id=current_user.id)
    return {"success": True, "registrationDetails": details}


@router.put("/update-event-registration/{registration_id}")
async def update_event_registration(
    registration_id: int,
    payload: schemas.UpdateRegistrationRequest,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.update_registration(registration_id, payload, user_id=current_user.id)
    return {"success": True, "message": "Registration updated successfully!"}


@router.delete("/event-registrations/{registration_id}")
async def delete_event_registration(
    registration_id: int,
    current_user: Principal = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.delete_registration(registration_id, user_id=current_user.id)
    return {"success": True, "message": "Registration deleted."}
