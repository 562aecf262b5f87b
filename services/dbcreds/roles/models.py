"""Role definition types.

RoleWriteRequest is the validated input of the create path; RoleEntry is the
persisted record, serialized as ``{"sql": "..."}``.
"""

from pydantic import BaseModel, ConfigDict, Field

ROLE_NAME_PATTERN = r"^\w+$"


class RoleEntry(BaseModel):
    """Stored role record. The template is kept verbatim."""

    model_config = ConfigDict(extra="ignore")

    sql: str


class RoleWriteRequest(BaseModel):
    """Create/overwrite request for a role definition."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=ROLE_NAME_PATTERN, description="Name of the role.")
    sql: str = Field(
        min_length=1,
        description="SQL string to create a user. See the roles path help for substitutions.",
    )
