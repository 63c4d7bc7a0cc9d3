"""Roles router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response, status

from artifactory_roles.constants.validation import MAX_ROLE_NAME_LENGTH, ROLE_NAME_PATTERN
from artifactory_roles.dependencies import get_role_service
from artifactory_roles.models.dto.role import (
    RoleBindingResponse,
    RoleListResponse,
    RoleRepairResponse,
    RoleResponse,
    RoleWriteRequest,
    RoleWriteResponse,
)
from artifactory_roles.security.auth import require_api_token
from artifactory_roles.security.rate_limit import ROLE_DELETE_LIMIT, ROLE_WRITE_LIMIT, limiter
from artifactory_roles.services.role_service import RoleService

router = APIRouter(dependencies=[Depends(require_api_token)])

RoleName = Annotated[str, Path(pattern=ROLE_NAME_PATTERN, max_length=MAX_ROLE_NAME_LENGTH)]


@router.get("", response_model=RoleListResponse)
async def list_roles(
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleListResponse:
    """List the names of all roles."""
    return RoleListResponse(keys=await service.list_roles())


@router.api_route("/{name}", methods=["PUT", "POST"], response_model=RoleWriteResponse)
@limiter.limit(ROLE_WRITE_LIMIT)
async def write_role(
    request: Request,
    name: RoleName,
    data: RoleWriteRequest,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleWriteResponse:
    """Create or update a role and reconcile its Artifactory objects.

    The whole permission target list is validated first; nothing changes
    locally or remotely when any entry is invalid.
    """
    return await service.create_or_update_role(name, data)


@router.get(
    "/{name}",
    response_model=RoleResponse,
    responses={204: {"description": "Role does not exist"}},
)
async def read_role(
    name: RoleName,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleResponse | Response:
    """Read a role. Returns 204 without a body when the role does not exist."""
    role = await service.read_role(name)
    if role is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return role


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(ROLE_DELETE_LIMIT)
async def delete_role(
    request: Request,
    name: RoleName,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> Response:
    """Delete a role, its permission targets and its group.

    Deleting a role that does not exist succeeds.
    """
    await service.delete_role(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{name}/repair", response_model=RoleRepairResponse)
@limiter.limit(ROLE_WRITE_LIMIT)
async def repair_role(
    request: Request,
    name: RoleName,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleRepairResponse:
    """Finish an interrupted reconciliation of a role."""
    repaired = await service.repair_role(name)
    return RoleRepairResponse(role_name=name, repaired=repaired)


@router.get("/{name}/binding", response_model=RoleBindingResponse)
async def get_role_binding(
    name: RoleName,
    service: Annotated[RoleService, Depends(get_role_service)],
) -> RoleBindingResponse:
    """Get the group and TTLs credentials for the role are bound to."""
    return await service.get_role_binding(name)
