"""Role definition lifecycle: validate-then-store on create, direct store
access for read, list and delete.
"""

from dbcreds.db.protocol import StatementPreparer
from dbcreds.logging_config import get_logger
from dbcreds.roles.models import RoleEntry, RoleWriteRequest
from dbcreds.roles.store import RoleStore
from dbcreds.roles.template import unknown_placeholders
from dbcreds.roles.validator import validate_template

logger = get_logger(__name__)


async def create_role(store: RoleStore, db: StatementPreparer, request: RoleWriteRequest) -> list[str]:
    """Validate and store a role definition, replacing any existing one.

    Returns warnings about the template (currently: placeholders that will
    not be substituted). Nothing is stored when validation fails.

    Raises:
        TemplateValidationError: The database rejected the rendered template.
        DatabaseUnavailableError: The database could not be reached.
        StorageError: The storage medium failed.
    """
    await validate_template(request.sql, db)

    await store.put(request.name, request.sql)
    logger.info("Role written", role=request.name)

    warnings = [
        f"Placeholder '{{{{{key}}}}}' is not recognized and will not be substituted"
        for key in unknown_placeholders(request.sql)
    ]
    if warnings:
        logger.warning("Role template has unrecognized placeholders", role=request.name)
    return warnings


async def read_role(store: RoleStore, name: str) -> RoleEntry | None:
    return await store.get(name)


async def delete_role(store: RoleStore, name: str) -> None:
    """Delete a role definition. Deleting a missing role is not an error."""
    await store.delete(name)
    logger.info("Role deleted", role=name)


async def list_roles(store: RoleStore) -> list[str]:
    return await store.list_names()
