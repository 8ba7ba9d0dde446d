"""Business profile and user administration endpoints"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from bizledger.api.dependencies import get_access, get_audit_logger, get_business, require_permission
from bizledger.api.v1.schemas import (
    BusinessProfileRequest,
    BusinessProfileResponse,
    CreatedResponse,
    UserCreateRequest,
    UserPermissionsRequest,
    UserResponse,
)
from bizledger.domain.permissions import Permission
from bizledger.infrastructure.database.models import BusinessSettings
from bizledger.services.access import AccessService, Actor
from bizledger.services.audit import AuditLogger
from bizledger.services.business import BusinessProfileService

router = APIRouter()

PROFILE_FIELDS = tuple(BusinessProfileRequest.model_fields)


def profile_response(profile: BusinessSettings) -> BusinessProfileResponse:
    return BusinessProfileResponse(**{name: getattr(profile, name) for name in PROFILE_FIELDS})


def user_response(user: Actor) -> UserResponse:
    return UserResponse(id=user.user_id, username=user.username, role=user.role.value, permissions=user.permissions)


@router.get("/settings", response_model=BusinessProfileResponse)
def get_business_profile(business: BusinessProfileService = Depends(get_business)):
    return profile_response(business.get_profile())


@router.put("/settings", response_model=BusinessProfileResponse)
def update_business_profile(
    request_body: BusinessProfileRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_SETTINGS)),
    business: BusinessProfileService = Depends(get_business),
    audit: AuditLogger = Depends(get_audit_logger),
):
    profile = business.update_profile(**request_body.model_dump())
    background_tasks.add_task(
        audit.record, actor.user_id, "UPDATE", "Settings", profile.id, "Updated business profile"
    )
    return profile_response(profile)


@router.get("/users", response_model=List[UserResponse])
def list_users(
    actor: Actor = Depends(require_permission(Permission.MANAGE_USERS)),
    access: AccessService = Depends(get_access),
):
    return [user_response(user) for user in access.list_users()]


@router.post("/users", response_model=CreatedResponse, status_code=201)
def create_user(
    request_body: UserCreateRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_USERS)),
    access: AccessService = Depends(get_access),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Create a user with an initial set of grants; credentials are set up at login"""
    user_id = access.create_user(request_body.username, request_body.role, request_body.permissions)
    user = access.load_actor(user_id)
    background_tasks.add_task(
        audit.record, actor.user_id, "CREATE", "Users", user_id, f"Created {user.role.value} user {user.username}"
    )
    return CreatedResponse(id=user_id)


@router.put("/users/{user_id}/permissions", response_model=UserResponse)
def set_user_permissions(
    user_id: int,
    request_body: UserPermissionsRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_permission(Permission.MANAGE_USERS)),
    access: AccessService = Depends(get_access),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Replace the user's grants with exactly the given permissions"""
    access.set_permissions(user_id, request_body.permissions)
    user = access.load_actor(user_id)
    background_tasks.add_task(
        audit.record,
        actor.user_id,
        "UPDATE",
        "Users",
        user_id,
        f"Set permissions for {user.username}: {', '.join(sorted(user.permissions)) or 'none'}",
    )
    return user_response(user)
