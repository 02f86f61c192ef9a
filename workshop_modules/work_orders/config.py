"""
Work Order Configuration Schema.

Defines numbering, staff roles, and the status transition policy for work
orders.  Actual values are loaded from the process settings at runtime.
"""

from dataclasses import dataclass
from typing import Self

from workshop_kernel.logging_config import get_logger

logger = get_logger("modules.work_orders.config")


@dataclass
class WorkOrderConfig:
    """
    Configuration schema for the work order module.

    Override at instantiation with shop-specific values:

        config = WorkOrderConfig(number_prefix="JOB-", number_width=5)
    """

    # Numbering: WO-000001
    number_prefix: str = "WO-"
    number_width: int = 6
    sequence_name: str = "work_order"

    # Roles allowed as responsible worker
    staff_roles: tuple[str, ...] = ("ADMIN", "WORKER")

    # Status policy.  False: COMPLETED and CANCELLED are terminal.
    # True: status alone may leave them (line and date edits stay gated).
    allow_terminal_reopen: bool = False

    def __post_init__(self):
        if self.number_width < 1:
            raise ValueError("number_width must be at least 1")
        self.staff_roles = tuple(self.staff_roles)
        logger.info(
            "work_order_config_initialized",
            extra={
                "number_prefix": self.number_prefix,
                "number_width": self.number_width,
                "sequence_name": self.sequence_name,
                "staff_roles": list(self.staff_roles),
                "allow_terminal_reopen": self.allow_terminal_reopen,
            },
        )

    def format_number(self, value: int) -> str:
        """Render a sequence value as a work order number."""
        return f"{self.number_prefix}{value:0{self.number_width}d}"

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the shop defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "work_order_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
