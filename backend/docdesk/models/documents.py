from __future__ import annotations

from dataclasses import dataclass, field

QUOTE = "QUOTE"
DELIVERY = "DELIVERY"

STATUS_DRAFT = "DRAFT"
STATUS_FINAL = "FINAL"


@dataclass
class DocItem:
    """
    One line on a quote or delivery note.

    product_id links the line to an inventory Product; an empty product_id is
    a free-text (custom) line that never touches stock.
    line_total_cents is derived from quantity and unit_price_cents and is
    recomputed by the document engine, never trusted from input.
    """
    row_id: str
    product_id: str = ""
    description: str = ""
    unit: str = "und"
    quantity: int = 1
    unit_price_cents: int = 0
    line_total_cents: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "DocItem":
        return cls(
            row_id=data["row_id"],
            product_id=data.get("product_id") or "",
            description=data.get("description", ""),
            unit=data.get("unit") or "und",
            quantity=int(data.get("quantity", 1)),
            unit_price_cents=int(data.get("unit_price_cents") or 0),
            line_total_cents=int(data.get("line_total_cents") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "row_id": self.row_id,
            "product_id": self.product_id,
            "description": self.description,
            "unit": self.unit,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


@dataclass
class Document:
    """
    Quote or delivery note (document-first, not inventory-first).

    LIFECYCLE: DRAFT -> FINAL, one way. A draft only lives in memory; saving
    finalizes it. number is empty until the first save and is never changed
    afterwards (e.g. "PRE-000303", "NE-000012").

    CLIENT FIELDS are a denormalized copy taken when the document is saved;
    client_id is informational only.
    """
    id: str
    type: str = QUOTE
    number: str = ""
    status: str = STATUS_DRAFT
    date: str = ""
    time: str = ""
    due_date: str | None = None

    client_id: str = ""
    client_name: str = ""
    client_rif: str = ""
    client_address: str = ""
    client_phone: str = ""
    description: str = ""

    items: list[DocItem] = field(default_factory=list)

    # Totals (all amounts in cents)
    subtotal_cents: int = 0
    tax_rate: float = 0
    tax_amount_cents: int = 0
    total_cents: int = 0

    def __repr__(self) -> str:
        return f"<Document id={self.id} type={self.type} number={self.number!r} status={self.status}>"

    @property
    def is_final(self) -> bool:
        return self.status == STATUS_FINAL

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        return cls(
            id=data["id"],
            type=data.get("type", QUOTE),
            number=data.get("number") or "",
            status=data.get("status", STATUS_DRAFT),
            date=data.get("date", ""),
            time=data.get("time", ""),
            due_date=data.get("due_date"),
            client_id=data.get("client_id") or "",
            client_name=data.get("client_name", ""),
            client_rif=data.get("client_rif", ""),
            client_address=data.get("client_address", ""),
            client_phone=data.get("client_phone", ""),
            description=data.get("description", ""),
            items=[DocItem.from_dict(i) for i in data.get("items") or []],
            subtotal_cents=int(data.get("subtotal_cents") or 0),
            tax_rate=data.get("tax_rate") or 0,
            tax_amount_cents=int(data.get("tax_amount_cents") or 0),
            total_cents=int(data.get("total_cents") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "number": self.number,
            "status": self.status,
            "date": self.date,
            "time": self.time,
            "due_date": self.due_date,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "client_rif": self.client_rif,
            "client_address": self.client_address,
            "client_phone": self.client_phone,
            "description": self.description,
            "items": [i.to_dict() for i in self.items],
            "subtotal_cents": self.subtotal_cents,
            "tax_rate": self.tax_rate,
            "tax_amount_cents": self.tax_amount_cents,
            "total_cents": self.total_cents,
        }
