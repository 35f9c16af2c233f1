"""Location model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    name: str = ""
    country: str = ""
    state: str = ""

    @property
    def label(self) -> str:
        """Recent-search label: "City, Country"."""
        return f"{self.name}, {self.country}"

    @property
    def suggestion_label(self) -> str:
        """Suggestion label: "City, State, Country" (state omitted when empty)."""
        if self.state:
            return f"{self.name}, {self.state}, {self.country}"
        return f"{self.name}, {self.country}"
