"""
Department registry - department code to display label.

Used only for display composition ("Manager - Sales"). Unknown codes are
labelled with the raw code rather than rejected.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping

NO_DEPARTMENT = ""

DEFAULT_DEPARTMENTS: Mapping[str, str] = MappingProxyType({
    "sales": "Sales",
    "marketing": "Marketing",
    "hr": "Human Resources",
    "finance": "Finance",
    "it": "Information Technology",
    "operations": "Operations",
    "specifications": "Specifications",
    "business_development": "Business Development",
    "accounts": "Accounts",
    "technical": "Technical",
    "testing": "Testing",
    "territory": "Territory",
    "general_management": "General Management",
    "head_office": "Head Office",
    NO_DEPARTMENT: "No Department",
})


class DepartmentRegistry:
    """Immutable code -> label table."""

    def __init__(self, departments: Mapping[str, str] = DEFAULT_DEPARTMENTS):
        labels = dict(departments)
        labels.setdefault(NO_DEPARTMENT, "No Department")
        self._labels: Mapping[str, str] = MappingProxyType(labels)

    def label(self, code: str) -> str:
        """Registered label for a code, or the code itself when unregistered."""
        return self._labels.get(code, code)

    def is_known(self, code: str) -> bool:
        return code in self._labels

    def codes(self) -> List[str]:
        return list(self._labels)

    def list_departments(self) -> List[Dict[str, str]]:
        return [{"code": code, "label": label} for code, label in self._labels.items()]

    def __contains__(self, code: object) -> bool:
        return code in self._labels

    def __len__(self) -> int:
        return len(self._labels)


_default_departments = DepartmentRegistry()


def department_label(code: str) -> str:
    """Label lookup against the built-in department table."""
    return _default_departments.label(code)
