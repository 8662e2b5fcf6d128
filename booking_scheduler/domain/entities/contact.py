from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContactDetails:
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    goals: str = ""

    def merged_with(self, prefill: "ContactDetails | None") -> "ContactDetails":
        """Fill empty fields from prefill, never overwriting entered values."""
        if prefill is None:
            return self
        return ContactDetails(
            name=self.name if self.name.strip() else prefill.name,
            company=self.company if self.company.strip() else prefill.company,
            email=self.email if self.email.strip() else prefill.email,
            phone=self.phone if self.phone.strip() else prefill.phone,
            goals=self.goals if self.goals.strip() else prefill.goals,
        )


@dataclass(frozen=True)
class NormalizedPhone:
    display: str
    e164: str


@dataclass(frozen=True)
class IdentityCreated:
    request_id: str
    lead_id: str | None = None
