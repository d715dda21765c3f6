"""
Translation file lint for Odoo ``.po`` exports.

Runs locally on the file content; no server is involved. Entries are checked
for missing translations, placeholder mismatches, and record references
(``model:...``) that are translated more than once.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

import polib

from odootools.common.errors import InvalidInputError
from odootools.common.logger import get_logger
from odootools.inspection.models import PoIssue, PoStats, PoValidationReport

logger = get_logger("inspection.po")

MODEL_REFERENCE_PREFIX = "model:"
PLACEHOLDER = re.compile(r"%(?:\(\w+\))?[sdif]")

_DUPLICATE_TYPES = {"duplicate", "duplicateReference"}


def _is_record_context(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(MODEL_REFERENCE_PREFIX)


def _references(entry: polib.POEntry) -> List[str]:
    refs = []
    for path, line in entry.occurrences:
        ref = f"{path}:{line}" if line else path
        if ref.strip():
            refs.append(ref.strip())
    return refs


def _translations(entry: polib.POEntry) -> List[str]:
    if entry.msgid_plural:
        return [entry.msgstr_plural[k] for k in sorted(entry.msgstr_plural)]
    return [entry.msgstr]


def _placeholders(text: str) -> List[str]:
    return sorted(PLACEHOLDER.findall(text))


def parse_po(content: str) -> polib.POFile:
    if not content or not isinstance(content, str) or not content.strip():
        raise InvalidInputError("Missing .po content")
    try:
        # Leading newline keeps polib from reading the text as a file path.
        return polib.pofile("\n" + content)
    except (OSError, ValueError) as exc:
        raise InvalidInputError("Failed to parse .po file", details=str(exc)) from exc


def validate_po(content: str) -> PoValidationReport:
    """Lints the text of a ``.po`` file.

    Raises:
        InvalidInputError: The content is empty or not a parseable .po file.
    """
    po = parse_po(content)

    issues: List[PoIssue] = []
    seen_records: Dict[str, str] = {}
    seen_references: Dict[str, str] = {}
    stats = PoStats()

    for entry in po:
        if entry.obsolete:
            continue
        stats.total_entries += 1
        msgid = entry.msgid or ""
        msgctxt = entry.msgctxt

        def issue(kind: str, details: str) -> None:
            issues.append(PoIssue(type=kind, msgid=msgid, msgctxt=msgctxt, details=details))

        references = _references(entry)
        record_references = [r for r in references if _is_record_context(r)]
        record_context = msgctxt if _is_record_context(msgctxt) else next(iter(record_references), None)

        if record_context:
            key = f"{record_context}::{msgid}"
            if key in seen_records:
                issue("duplicate", "This issue can be caused by duplicates entries who are referring to the same field.")
            else:
                seen_records[key] = msgid

        translations = _translations(entry)
        if any(t and t.strip() for t in translations):
            stats.translated += 1
        else:
            issue("missing", "Missing translation (msgstr is empty)")

        if _placeholders(msgid) != _placeholders("\n".join(translations)):
            issue("placeholder", "Placeholder mismatch between msgid and msgstr")

        for reference in record_references:
            previous = seen_references.get(reference)
            if previous is not None:
                issue("duplicateReference", f'Reference "{reference}" already used by msgid "{previous}"')
            else:
                seen_references[reference] = msgid

    stats.missing = stats.total_entries - stats.translated
    stats.duplicates = sum(1 for i in issues if i.type in _DUPLICATE_TYPES)
    issues.sort(key=lambda i: 0 if i.type in _DUPLICATE_TYPES else 1)

    logger.info(f"Validated {stats.total_entries} .po entries: {len(issues)} issue(s)")
    return PoValidationReport(stats=stats, issues=issues)
