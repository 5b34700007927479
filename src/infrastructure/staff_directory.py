"""
Staff Directory Module

Handles loading the read-only staff directory from a CSV file, falling back
to the built-in office roster.
"""

import csv
from pathlib import Path
from typing import Dict, List, Optional

from domain.entities import Role, StaffMember
from infrastructure.logger import get_logger

logger = get_logger("StaffDirectory")

MUNICIPAL = "municipal"
PROVINCIAL = "provincial"

DEFAULT_STAFF = [
    StaffMember("emp_005", "Al-Benladin A. Hadji Usop", Role.DEVELOPER, "Tax Mapper II"),
    StaffMember("emp_003", "Estrella C. Serna, MPS", Role.DEVELOPER, "Municipal Assessor"),
    StaffMember("prov_01", "Provincial Personnel", Role.DEVELOPER, "Provincial Staff", PROVINCIAL),
    StaffMember("emp_002", "Sadruddin A. Masukat, REA", Role.MODERATOR, "Provincial Assessor"),
    StaffMember("emp_004", "Maqdoum T. Mamogcat", Role.MODERATOR, "LAOO III"),
    StaffMember("emp_006", "Vilma S. Timan", Role.MODERATOR, "Book Binder III"),
    StaffMember("emp_007", "Norhan G. Dalos", Role.MODERATOR, "Assessment Clerk I"),
    StaffMember("emp_008", "Debora P. Maongko", Role.MODERATOR, "Adm. Asst. V"),
    StaffMember("emp_009", "Mustapha D. Lintongan", Role.MODERATOR, "Adm. Asst. II"),
    StaffMember("emp_010", "Bert P. Ayunan", Role.MODERATOR, "Adm. Aid V"),
    StaffMember("emp_011", "Gutan M. Malingco", Role.MODERATOR, "Casual"),
    StaffMember("emp_012", "Al-Micdad L. Mohammad", Role.MODERATOR, "Casual"),
]


class StaffDirectory:
    """
    Read-only lookup of staff members.

    The CSV should have columns: id, name, role, position, group
    where group is either "municipal" or "provincial".
    """

    ROLE_MAPPING = {role.value.lower(): role for role in Role}

    def __init__(self, staff: Optional[List[StaffMember]] = None):
        self._staff: List[StaffMember] = list(staff if staff is not None else DEFAULT_STAFF)
        self._by_id: Dict[str, StaffMember] = {s.id: s for s in self._staff}

    @classmethod
    def load_from_csv(cls, csv_path: Path) -> "StaffDirectory":
        """
        Load the directory from a CSV file.

        Args:
            csv_path: Path to the CSV file

        Returns:
            StaffDirectory; the built-in roster if the file does not exist
        """
        csv_path = Path(csv_path)
        if not csv_path.exists():
            logger.warning(f"Staff file not found: {csv_path}, using built-in roster")
            return cls()

        staff = []
        with open(csv_path, 'r', encoding='utf-8-sig') as f:
            reader = csv.DictReader(f)
            for row in reader:
                staff_id = (row.get('id') or row.get('Id') or '').strip()
                name = (row.get('name') or row.get('Name') or '').strip()
                if not staff_id or not name:
                    continue

                role_str = (row.get('role') or '').strip().lower()
                group = (row.get('group') or MUNICIPAL).strip().lower()
                staff.append(StaffMember(
                    id=staff_id,
                    name=name,
                    role=cls.ROLE_MAPPING.get(role_str, Role.MODERATOR),
                    position=(row.get('position') or '').strip(),
                    group=PROVINCIAL if group == PROVINCIAL else MUNICIPAL,
                ))

        logger.info(f"Loaded {len(staff)} staff from {csv_path.name}")
        return cls(staff)

    def get(self, staff_id: str) -> Optional[StaffMember]:
        return self._by_id.get(staff_id)

    def all(self) -> List[StaffMember]:
        return list(self._staff)

    def municipal(self) -> List[StaffMember]:
        """Staff shown on the attendance dashboards."""
        return [s for s in self._staff if s.group != PROVINCIAL]

    def provincial(self) -> List[StaffMember]:
        return [s for s in self._staff if s.group == PROVINCIAL]
