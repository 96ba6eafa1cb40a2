"""Domain enumerations for the Office Management application.

Enums represent fixed sets of domain values (tenant status, attendance
status, leave status, invoice status, ...). Values are what is stored in
the database and sent over the API.
"""

from enum import Enum


class TenantStatus(str, Enum):
    """Tenant lifecycle status.

    ACTIVE and TRIAL tenants accept traffic; SUSPENDED and TERMINATED
    tenants are rejected by the tenant database manager.
    """

    ACTIVE = "ACTIVE"
    TRIAL = "TRIAL"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings.

        Returns:
            List of enum value strings (e.g. for CHECK constraints).
        """
        return [status.value for status in cls]

    @property
    def is_blocked(self) -> bool:
        """True when requests for this tenant must be refused."""
        return self in (TenantStatus.SUSPENDED, TenantStatus.TERMINATED)


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"
    OFFBOARDED = "offboarded"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERN = "intern"


class WorkLocation(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    HYBRID = "hybrid"


class OffboardingReason(str, Enum):
    RESIGNATION = "resignation"
    TERMINATION = "termination"
    RETIREMENT = "retirement"
    CONTRACT_END = "contract_end"
    OTHER = "other"


class AttendanceStatus(str, Enum):
    """Daily attendance status of an employee."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"
    HOLIDAY = "holiday"
    WEEKEND = "weekend"


class LeaveStatus(str, Enum):
    """Leave request lifecycle: pending → approved | rejected; pending/approved → cancelled."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class HolidayType(str, Enum):
    PUBLIC = "public"
    OPTIONAL = "optional"
    RESTRICTED = "restricted"


class OptionalHolidayStatus(str, Enum):
    """Employee choice for an optional holiday."""

    OPTED = "OPTED"
    CANCELLED = "CANCELLED"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status (master database)."""

    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELED = "CANCELED"
    REFUNDED = "REFUNDED"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class BillingCycle(str, Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class PlanChange(str, Enum):
    """Direction of a plan change, by monthly price."""

    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    SAME = "same"
