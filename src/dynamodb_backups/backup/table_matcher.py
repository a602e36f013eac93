"""
Table selection by name pattern.
"""

import re
from typing import List, Optional

from dynamodb_backups.core.context import RunContext
from dynamodb_backups.exceptions import InvalidTablePatternError, TableListingError


def compile_table_pattern(pattern: str) -> "re.Pattern":
    """Compile a table name pattern, raising InvalidTablePatternError if malformed."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidTablePatternError(pattern, str(e)) from e


class TableMatcher:
    """Lists every table in the store and keeps those matching a pattern."""

    def __init__(self, context: RunContext):
        self.context = context
        self.logger = context.logger.bind(action="listTables")
        self.listing_error: Optional[Exception] = None

    def match(self, pattern: Optional[str] = None) -> List[str]:
        """
        Return the names of all tables matching the pattern, in store order.

        The pattern is searched within each name, so anchors decide whether
        it is a prefix, suffix or whole-name match. It is compiled before any
        listing call. If listing fails part way, the names matched so far are
        returned and ``listing_error`` is set, unless strict listing is
        configured, in which case TableListingError is raised.

        Args:
            pattern: Regular expression, defaults to the configured table_regex

        Returns:
            Matched table names in the order the store returned them

        Raises:
            InvalidTablePatternError: If the pattern does not compile
            TableListingError: If listing fails and strict listing is enabled
        """
        if pattern is None:
            pattern = self.context.config.table_regex
        regex = compile_table_pattern(pattern)

        self.listing_error = None
        matched_tables: List[str] = []
        listed = 0

        try:
            for table_name in self.context.store.list_table_names():
                listed += 1
                if regex.search(table_name):
                    matched_tables.append(table_name)
        except Exception as e:
            self.listing_error = e
            error_msg = (
                f"Table listing failed after {listed} tables: {str(e)}"
            )
            if self.context.config.strict_listing:
                raise TableListingError(error_msg, matched_tables) from e
            self.logger.error(
                f"{error_msg}; continuing with {len(matched_tables)} matched tables",
                regex=pattern,
                exc_info=True,
            )

        self.logger.debug(
            f"Listed {listed} tables, {len(matched_tables)} matched",
            regex=pattern,
        )
        return matched_tables
