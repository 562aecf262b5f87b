"""
Load role definitions from a YAML file.

Each role is validated against the target database before it is stored,
exactly as the API does it. Re-running with the same file leaves storage
unchanged. Run via: python -m dbcreds.cli.load_roles roles.yaml

File format:

    roles:
      readonly: |
        CREATE ROLE "{{name}}" WITH LOGIN PASSWORD '{{password}}'
          VALID UNTIL '{{expiration}}';

Storage and database settings come from the usual DBCREDS_* environment
variables and /etc/dbcreds/config.yaml.
"""

import asyncio
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from dbcreds.config import settings
from dbcreds.db.connection import resolve_connection_url
from dbcreds.db.protocol import DatabaseUnavailableError
from dbcreds.db.session import close_db, get_preparer, init_db
from dbcreds.logging_config import configure_logging, get_logger
from dbcreds.roles.models import RoleWriteRequest
from dbcreds.roles.service import create_role
from dbcreds.roles.store import RoleStore
from dbcreds.roles.validator import TemplateValidationError
from dbcreds.storage import close_storage, get_storage, init_storage
from dbcreds.storage.protocol import StorageError

logger = get_logger("dbcreds.load_roles")


def read_role_file(path: Path) -> list[RoleWriteRequest]:
    """Parse a role file into validated write requests.

    Raises:
        ValueError: If the file is not a mapping of role names to SQL strings.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    roles = data.get("roles") if isinstance(data, dict) else None
    if not isinstance(roles, dict):
        raise ValueError(f"{path}: expected a top-level 'roles' mapping")

    requests = []
    for name, sql in roles.items():
        try:
            requests.append(RoleWriteRequest(name=str(name), sql=sql))
        except ValidationError as e:
            raise ValueError(f"{path}: invalid role '{name}': {e}") from None
    return requests


async def load_roles(path: Path) -> int:
    """Validate and store every role in ``path``. Returns the number that failed."""
    requests = read_role_file(path)

    await init_storage()
    try:
        await init_db(await resolve_connection_url(get_storage()))
        store = RoleStore(get_storage())
        db = get_preparer()

        failed = 0
        for request in requests:
            try:
                warnings = await create_role(store, db, request)
            except TemplateValidationError as e:
                failed += 1
                logger.error("Role rejected", role=request.name, error=str(e))
                continue
            for warning in warnings:
                logger.warning(warning, role=request.name)
            logger.info("Role loaded", role=request.name)
        return failed
    finally:
        await close_db()
        await close_storage()


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: python -m dbcreds.cli.load_roles ROLES_FILE", file=sys.stderr)
        sys.exit(2)

    configure_logging(json_logs=settings.json_logs, log_level=settings.log_level)

    try:
        failed = asyncio.run(load_roles(Path(args[0])))
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Could not read role file", error=str(e))
        sys.exit(1)
    except (DatabaseUnavailableError, StorageError) as e:
        logger.error("Role loading aborted", error=str(e))
        sys.exit(1)

    if failed:
        logger.error("Some roles were not loaded", failed=failed)
        sys.exit(1)


if __name__ == "__main__":
    main()
