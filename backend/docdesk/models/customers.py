from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Client:
    """
    Client directory entry.

    Documents copy the client fields at save time, so editing or deleting a
    client never changes documents already issued to them.
    """
    id: str
    name: str
    rif: str = ""
    address: str = ""
    phone: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Client":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            rif=data.get("rif", ""),
            address=data.get("address", ""),
            phone=data.get("phone", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "rif": self.rif,
            "address": self.address,
            "phone": self.phone,
        }
