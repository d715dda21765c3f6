from .modules import list_modules, installed_modules, compare_modules, count_records
from .access import check_access_rights, compare_access_rights, normalize_many2many_ids
from .groups import group_insight
from .po import validate_po

__all__ = [
    "list_modules",
    "installed_modules",
    "compare_modules",
    "count_records",
    "check_access_rights",
    "compare_access_rights",
    "normalize_many2many_ids",
    "group_insight",
    "validate_po",
]
