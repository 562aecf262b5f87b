"""FastAPI dependencies shared by the routers."""

from fastapi import Depends

from dbcreds.roles.store import RoleStore
from dbcreds.storage import get_storage
from dbcreds.storage.protocol import KeyValueStore


def get_role_store(storage: KeyValueStore = Depends(get_storage)) -> RoleStore:
    return RoleStore(storage)
