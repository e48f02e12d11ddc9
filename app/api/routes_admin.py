"""
Admin panel - the authorization tables in force
"""

from fastapi import APIRouter

from app.core.access import PUBLIC_ROUTES, ROLE_CAPABILITIES, ROUTE_ROLES, Role
from app.utils.responses import success_response

router = APIRouter()

@router.get("")
async def admin_panel():
    """Route and capability tables, for auditing who may do what"""
    return success_response(
        message="Access policy retrieved",
        data={
            "public_routes": ["/", *PUBLIC_ROUTES],
            "routes": [
                {"route": route, "roles": sorted(role.value for role in roles)}
                for route, roles in ROUTE_ROLES.items()
            ],
            "capabilities": {
                role.value: sorted(capability.value for capability in ROLE_CAPABILITIES[role])
                for role in Role
            },
        }
    )
