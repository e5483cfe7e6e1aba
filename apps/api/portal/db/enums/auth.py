"""Auth-related enums."""

from enum import Enum


class UserType(str, Enum):
    """
    Which side of the portal a user belongs to.

    - SHIPPER: company-side user (profiles table)
    - NTS_USER: broker/staff user (nts_users table)
    """

    SHIPPER = "shipper"
    NTS_USER = "nts_user"


class Role(str, Enum):
    """
    Portal roles.

    - SHIPPER: Requests quotes for their own company
    - SALES_REP: Prices quotes for assigned companies
    - MANAGER: Sales rep duties plus company/user editing
    - ADMIN: Business admin (companies, users, roles)
    - SUPER_ADMIN: Platform admin (system config, database access)
    - SUPPORT: Read-only staff handling chat and tickets
    """

    SHIPPER = "shipper"
    SALES_REP = "sales_rep"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    SUPPORT = "support"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_
