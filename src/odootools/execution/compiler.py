from __future__ import annotations

import re

from odootools.execution.script_template import SCRIPT_TEMPLATE, TEMPLATE_VERSION
from odootools.execution.tokens import RunKeys

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class StatementCompiler:
    """Renders the scheduled-job script for one statement run.

    Every dynamic value enters the script as a ``repr`` literal through its
    own template slot, so the statement text can only ever be the argument of
    the single ``env.cr.execute(statement)`` call.
    """

    version = TEMPLATE_VERSION

    def compile(self, statement: str, keys: RunKeys, commit: bool) -> str:
        if not statement or not statement.strip():
            raise ValueError("Statement must not be empty.")
        if not _IDENTIFIER.match(keys.savepoint):
            raise ValueError(f"Savepoint name '{keys.savepoint}' is not a valid SQL identifier.")

        return SCRIPT_TEMPLATE.substitute(
            version=self.version,
            statement=repr(statement),
            result_key=repr(keys.result_key),
            error_key=repr(keys.error_key),
            savepoint=repr(keys.savepoint),
            commit=repr(bool(commit)),
        )
