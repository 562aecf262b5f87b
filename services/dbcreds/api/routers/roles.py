"""Role definition endpoints.

Endpoints:
    GET    /v1/roles               list role names
    GET    /v1/roles/{name}        read a role's SQL template
    POST   /v1/roles/{name}        create or overwrite a role (validated)
    PUT    /v1/roles/{name}        same as POST
    DELETE /v1/roles/{name}        delete a role (idempotent)
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Response, status
from fastapi.responses import JSONResponse

from dbcreds.api.dependencies import get_role_store
from dbcreds.db.protocol import StatementPreparer
from dbcreds.db.session import get_preparer
from dbcreds.logging_config import get_logger
from dbcreds.roles.models import ROLE_NAME_PATTERN, RoleWriteRequest
from dbcreds.roles.service import create_role, delete_role, list_roles, read_role
from dbcreds.roles.store import RoleStore
from dbcreds.roles.validator import TemplateValidationError

router = APIRouter(tags=["roles"])
logger = get_logger(__name__)

ROLE_HELP_SYNOPSIS = "Manage the roles that can be created with this backend."

ROLE_HELP_DESCRIPTION = """
This path lets you manage the roles that can be created with this backend.

The "sql" parameter customizes the SQL string used to create the role.
This can only be a single SQL query. Some substitution will be done to the
SQL string for certain keys. The names of the variables must be surrounded
by "{{" and "}}" to be replaced.

  * "name" - The random username generated for the DB user.

  * "password" - The random password generated for the DB user.

  * "expiration" - The timestamp when this user will expire.

Example of a decent SQL query to use:

    CREATE ROLE "{{name}}" WITH
      LOGIN
      PASSWORD '{{password}}'
      VALID UNTIL '{{expiration}}';

Note the above user wouldn't be able to access anything. To give a user access
to resources, create roles manually in PostgreSQL, then use the "IN ROLE"
clause for CREATE ROLE to add the user to more roles.
"""


@router.get("/roles", summary="List roles")
async def list_roles_endpoint(store: RoleStore = Depends(get_role_store)) -> JSONResponse:
    names = await list_roles(store)
    return JSONResponse(content={"data": {"keys": names}})


@router.get(
    "/roles/{role_name}", summary=ROLE_HELP_SYNOPSIS, description=ROLE_HELP_DESCRIPTION
)
async def read_role_endpoint(
    role_name: str = Path(..., pattern=ROLE_NAME_PATTERN),
    store: RoleStore = Depends(get_role_store),
) -> JSONResponse:
    role = await read_role(store, role_name)
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return JSONResponse(content={"data": {"sql": role.sql}})


@router.api_route(
    "/roles/{role_name}",
    methods=["POST", "PUT"],
    summary=ROLE_HELP_SYNOPSIS,
    description=ROLE_HELP_DESCRIPTION,
    response_model=None,
)
async def write_role_endpoint(
    role_name: str = Path(..., pattern=ROLE_NAME_PATTERN),
    sql: str = Body(..., embed=True, min_length=1),
    store: RoleStore = Depends(get_role_store),
    db: StatementPreparer = Depends(get_preparer),
) -> Response:
    """Validate the SQL against the database, then store it."""
    request = RoleWriteRequest(name=role_name, sql=sql)
    try:
        warnings = await create_role(store, db, request)
    except TemplateValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"errors": [str(e)]}
        )

    if warnings:
        return JSONResponse(content={"warnings": warnings})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/roles/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role_endpoint(
    role_name: str = Path(..., pattern=ROLE_NAME_PATTERN),
    store: RoleStore = Depends(get_role_store),
) -> Response:
    await delete_role(store, role_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
