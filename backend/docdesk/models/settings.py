from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CompanySettings:
    """
    Singleton company configuration.

    Holds the issuer identity printed on documents, the two numbering
    counters (one per document type), the default tax rate for new drafts
    and display preferences.

    COUNTERS: next_quote_number and next_delivery_number are the numbers the
    NEXT finalized document of that type will receive. Saving moves them forward
    by exactly one per first finalization; a manual change must stay above
    the last number issued.
    """
    name: str = "My Company"
    rif: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_url: str = ""
    terms: str = "* Prices subject to change without notice.\n* Offer valid for 5 days."
    payment_conditions: str = "80% advance payment, balance against partial progress billing."
    next_quote_number: int = 1
    next_delivery_number: int = 1
    default_tax_rate: float = 16
    currency_symbol: str = "$"
    logo_position: str = "left"
    primary_color: str = "#0369a1"

    @classmethod
    def from_dict(cls, data: dict) -> "CompanySettings":
        known = {k: v for k, v in (data or {}).items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "rif": self.rif,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "logo_url": self.logo_url,
            "terms": self.terms,
            "payment_conditions": self.payment_conditions,
            "next_quote_number": self.next_quote_number,
            "next_delivery_number": self.next_delivery_number,
            "default_tax_rate": self.default_tax_rate,
            "currency_symbol": self.currency_symbol,
            "logo_position": self.logo_position,
            "primary_color": self.primary_color,
        }
