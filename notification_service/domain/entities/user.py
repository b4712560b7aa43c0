"""Domain entity representing a platform user account."""

from dataclasses import dataclass


@dataclass
class User:
    """Identity record owning a canonical name and email."""

    id: str
    external_id: str | None
    email: str | None
    name: str | None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts)


__all__ = ["User"]
