"""
Server-side script run by the one-shot scheduled job.

The script is evaluated by Odoo's restricted interpreter (``safe_eval``):
no imports, no dunder access, and only the builtins Odoo whitelists. It
therefore carries its own minimal JSON encoder instead of relying on
``json``.

Placeholders (``string.Template`` syntax) are the only substitution points;
each one receives a Python literal produced by ``repr``:

- ``$statement``: the statement text, executed exactly once.
- ``$result_key`` / ``$error_key``: ``ir.config_parameter`` keys.
- ``$savepoint``: savepoint name (validated identifier).
- ``$commit``: ``True`` to keep the statement's effects.

Bump ``TEMPLATE_VERSION`` whenever the payload layout changes.
"""
from string import Template

TEMPLATE_VERSION = 1

SCRIPT_TEMPLATE = Template(r'''# odootools statement job, template v$version
statement = $statement
result_key = $result_key
error_key = $error_key
savepoint = $savepoint
commit_changes = $commit

def _stringify(value):
    if value is None:
        return None
    try:
        return str(value)
    except Exception:
        try:
            return repr(value)
        except Exception:
            return "<unrepresentable>"

def _escape(text):
    chunks = []
    for char in text:
        if char == '"':
            chunks.append('\\"')
        elif char == '\\':
            chunks.append('\\\\')
        elif char == '\n':
            chunks.append('\\n')
        elif char == '\r':
            chunks.append('\\r')
        elif char == '\t':
            chunks.append('\\t')
        elif ord(char) < 32:
            chunks.append('\\u%04x' % ord(char))
        else:
            chunks.append(char)
    return ''.join(chunks)

def _to_json(value):
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float('inf'), float('-inf')):
            return 'null'
        return repr(value)
    if isinstance(value, (list, tuple)):
        return '[' + ','.join([_to_json(item) for item in value]) + ']'
    if isinstance(value, dict):
        parts = []
        for key, item in value.items():
            parts.append('"' + _escape(str(key)) + '":' + _to_json(item))
        return '{' + ','.join(parts) + '}'
    return '"' + _escape(_stringify(value) or '') + '"'

try:
    env.cr.execute('SAVEPOINT %s' % savepoint)
    env.cr.execute(statement)
    description = env.cr.description
    rows = env.cr.fetchall() if description else []
    columns = [column[0] for column in description] if description else []
    try:
        status_message = env.cr.statusmessage
    except Exception:
        status_message = None
    affected = env.cr.rowcount
    payload = {
        'statement': statement,
        'columns': columns,
        'rows': [[_stringify(cell) for cell in row] for row in rows],
        'row_count': len(rows) if description else affected,
        'affected_row_count': affected,
        'status_message': status_message,
        'executed_at': None,
        'dry_run': not commit_changes,
    }
    env.cr.execute('SAVEPOINT %s_ts' % savepoint)
    try:
        env.cr.execute('SELECT NOW()')
        stamp = env.cr.fetchone()
        if stamp:
            payload['executed_at'] = _stringify(stamp[0])
        env.cr.execute('RELEASE SAVEPOINT %s_ts' % savepoint)
    except Exception:
        payload['executed_at'] = None
        env.cr.execute('ROLLBACK TO SAVEPOINT %s_ts' % savepoint)
        env.cr.execute('RELEASE SAVEPOINT %s_ts' % savepoint)
    if commit_changes:
        env.cr.execute('RELEASE SAVEPOINT %s' % savepoint)
    else:
        env.cr.execute('ROLLBACK TO SAVEPOINT %s' % savepoint)
        env.cr.execute('RELEASE SAVEPOINT %s' % savepoint)
    env['ir.config_parameter'].sudo().set_param(result_key, _to_json(payload))
except Exception as exc:
    try:
        env.cr.execute('ROLLBACK TO SAVEPOINT %s' % savepoint)
        env.cr.execute('RELEASE SAVEPOINT %s' % savepoint)
    except Exception:
        pass
    env['ir.config_parameter'].sudo().set_param(
        error_key,
        _to_json({'statement': statement, 'error_message': str(exc)}),
    )
    raise
''')
