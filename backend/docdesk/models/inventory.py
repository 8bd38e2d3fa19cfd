from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Product:
    """
    Inventory unit.

    Authoritative price storage in cents (frontend may only format for display).
    stock is allowed to go negative: delivery notes are never blocked by
    on-hand quantity, they only record what left the warehouse.
    """
    id: str
    code: str
    description: str = ""
    price_cents: int = 0
    stock: int = 0
    unit: str = "und"

    def __repr__(self) -> str:
        return f"<Product id={self.id} code={self.code!r} stock={self.stock}>"

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data["id"],
            code=data.get("code", ""),
            description=data.get("description", ""),
            price_cents=int(data.get("price_cents") or 0),
            stock=int(data.get("stock") or 0),
            unit=data.get("unit") or "und",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "price_cents": self.price_cents,
            "stock": self.stock,
            "unit": self.unit,
        }
