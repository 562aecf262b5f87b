"""Test-prepare role SQL templates before they are stored.

A template is rendered with fixed stand-in values and handed to the target
database's prepare facility. The statement is parsed, never executed, and
the prepared handle is released as soon as the outcome is known.
"""

from dbcreds.db.protocol import StatementPrepareError, StatementPreparer, prepared
from dbcreds.logging_config import get_logger
from dbcreds.roles.template import VALIDATION_VALUES, render_query

logger = get_logger(__name__)


class TemplateValidationError(Exception):
    """The rendered template failed to parse on the target database."""

    def __init__(self, diagnostic: str) -> None:
        self.diagnostic = diagnostic
        super().__init__(f"Error testing query: {diagnostic}")


async def validate_template(raw_template: str, db: StatementPreparer) -> None:
    """Check that ``raw_template`` renders to a statement the database accepts.

    Raises:
        TemplateValidationError: The database rejected the rendered statement.
        DatabaseUnavailableError: The database could not be reached.
    """
    query = render_query(raw_template, VALIDATION_VALUES)

    try:
        async with prepared(db, query):
            pass
    except StatementPrepareError as e:
        logger.info("Template rejected by database", diagnostic=e.diagnostic)
        raise TemplateValidationError(e.diagnostic) from e
