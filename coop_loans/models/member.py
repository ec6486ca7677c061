"""Member model for the cooperative society."""

from dataclasses import dataclass
from datetime import datetime

from coop_loans.models.enums import MemberStatus


@dataclass
class Member:
    """Cooperative society member."""

    id: str  # Storage key referenced by Loan.member_id
    member_id: str  # Display id printed on member cards
    name: str
    phone: str
    email: str
    location: str
    status: MemberStatus
    account_number: str
    bank_name: str
    full_name: str | None = None
    nominee_name: str | None = None
    nominee_phone: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Name shown in tables and reports."""
        return self.full_name or self.name or "Unknown"
