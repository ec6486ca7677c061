"""Member generator."""

import random
from datetime import datetime, timedelta
from typing import Iterator

from coop_loans.generators.base import BaseGenerator
from coop_loans.models import Member, MemberStatus


class MemberGenerator(BaseGenerator):
    """Generate synthetic cooperative members."""

    STATUSES = list(MemberStatus)
    STATUS_WEIGHTS = [0.85, 0.10, 0.05]

    BANKS = [
        "Access Bank",
        "First Bank",
        "GTBank",
        "UBA",
        "Zenith Bank",
    ]

    def generate(self) -> Member:
        """Generate a single member.

        Returns
        -------
        Member
            Generated member.
        """
        name = self.fake.name()
        return Member(
            id=self.fake.uuid4(),
            member_id=f"MEM-{random.randint(1, 99999):05d}",
            name=name,
            full_name=name,
            phone=self.fake.phone_number(),
            email=self.fake.email(),
            location=self.fake.city(),
            status=random.choices(self.STATUSES, weights=self.STATUS_WEIGHTS, k=1)[0],
            account_number=f"{random.randint(0, 9999999999):010d}",
            bank_name=random.choice(self.BANKS),
            nominee_name=self.fake.name(),
            nominee_phone=self.fake.phone_number(),
            created_at=datetime.now() - timedelta(days=random.randint(30, 3 * 365)),
        )

    def generate_batch(self, count: int) -> Iterator[Member]:
        """Generate multiple members.

        Parameters
        ----------
        count : int
            Number of members to generate.

        Yields
        ------
        Member
            Generated members.
        """
        for _ in range(count):
            yield self.generate()
