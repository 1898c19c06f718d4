"""
Listing Repository - Storage for Properties and Reports
"""

from __future__ import annotations

from typing import Optional

from dreamkeys.listings.schema import Property, PropertyReport
from dreamkeys.storage import RecordCollection


class PropertyRepository(RecordCollection[Property]):
    """Properties keyed by property_id."""

    collection_name = "properties"

    def key_of(self, record: Property) -> str:
        return record.property_id

    def to_record(self, record: Property) -> dict:
        return record.to_dict()

    def from_record(self, data: dict) -> Property:
        return Property.from_dict(data)

    def list_by_agent(self, agent_email: str) -> list[Property]:
        """Get properties owned by an agent."""
        email = agent_email.strip().lower()
        return self.find(lambda p: p.agent_email == email)

    def list_advertised(self) -> list[Property]:
        return self.find(lambda p: p.is_advertised)

    def remove_by_agent(self, agent_email: str) -> int:
        """Remove every property owned by an agent. Returns the count removed."""
        email = agent_email.strip().lower()
        return self.remove_where(lambda p: p.agent_email == email)


class ReportRepository(RecordCollection[PropertyReport]):
    """Moderation reports keyed by report_id."""

    collection_name = "reports"

    def key_of(self, record: PropertyReport) -> str:
        return record.report_id

    def to_record(self, record: PropertyReport) -> dict:
        return record.to_dict()

    def from_record(self, data: dict) -> PropertyReport:
        return PropertyReport.from_dict(data)

    def list_for_property(self, property_id: Optional[str]) -> list[PropertyReport]:
        return self.find(lambda r: r.property_id == property_id)
