"""
Property Routes - Listing Lifecycle over HTTP

Routes:
- GET    /properties                        - List (?agent_email=, ?verification_status=,
                                              ?advertised=true)
- POST   /properties                        - Create as the calling agent
- GET    /properties/{id}                   - Single listing
- PATCH  /properties/{id}                   - Edit descriptive fields (owner/admin)
- DELETE /properties/{id}                   - Remove (owner/admin)
- PATCH  /properties/{id}/verify            - Set verified/rejected (admin)
- PATCH  /properties/{id}/advertise         - Advertise (admin)
- PATCH  /properties/{id}/remove-advertise  - Stop advertising (admin)
- DELETE /properties/agent/{email}          - Remove all of an agent's listings (admin)
- POST   /properties/{id}/report            - Report for moderation
- GET    /reports                           - Moderation reports (admin)
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from dreamkeys.container import Marketplace
from dreamkeys.errors import NotFoundError
from web.auth import get_marketplace, get_token


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(tags=["properties"])


# =============================================================================
# Request Models
# =============================================================================


class PropertyFields(BaseModel):
    """
    Descriptive listing fields.

    Owner, verification status and advertising are never taken from the
    body; unknown keys are dropped.
    """

    title: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    agent_name: Optional[str] = None
    price_min: Optional[int] = None
    price_max: Optional[int] = None


class VerifyRequest(BaseModel):
    verification_status: str
    expected_status: Optional[str] = None


class ReportRequest(BaseModel):
    report_description: str
    reporter_name: Optional[str] = None


# =============================================================================
# Listings
# =============================================================================


@router.get("/properties")
def list_properties(
    agent_email: Optional[str] = Query(None),
    verification_status: Optional[str] = Query(None),
    advertised: bool = Query(False),
    marketplace: Marketplace = Depends(get_marketplace),
):
    if advertised:
        properties = marketplace.properties.list_advertised()
    else:
        properties = marketplace.properties.list_properties(
            agent_email=agent_email, status=verification_status
        )
    return {
        "message": f"{len(properties)} properties",
        "properties": [p.to_dict() for p in properties],
    }


@router.post("/properties")
def create_property(
    body: PropertyFields,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.create(token, body.model_dump(exclude_unset=True))
    return {
        "message": "Property added successfully",
        "inserted_id": prop.property_id,
        "property": prop.to_dict(),
    }


@router.get("/properties/{property_id}")
def get_property(
    property_id: str,
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.get(property_id)
    return {"message": "Property found", "property": prop.to_dict()}


@router.patch("/properties/{property_id}")
def update_property(
    property_id: str,
    body: PropertyFields,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.update(token, property_id, body.model_dump(exclude_unset=True))
    return {"message": "Property updated successfully", "property": prop.to_dict()}


@router.delete("/properties/{property_id}")
def delete_property(
    property_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.delete(token, property_id)
    return {"message": "Property deleted successfully", "property_id": prop.property_id}


@router.delete("/properties/agent/{agent_email}")
def delete_agent_properties(
    agent_email: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    removed = marketplace.properties.delete_all_by_agent(token, agent_email)
    if removed == 0:
        raise NotFoundError("No properties found for the given agent")
    return {"message": "Agent properties deleted successfully", "deleted_count": removed}


# =============================================================================
# Verification and Advertising
# =============================================================================


@router.patch("/properties/{property_id}/verify")
def verify_property(
    property_id: str,
    body: VerifyRequest,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.verify(
        token,
        property_id,
        body.verification_status,
        expected_status=body.expected_status,
    )
    return {"message": "Property verification status updated", "property": prop.to_dict()}


@router.patch("/properties/{property_id}/advertise")
def advertise_property(
    property_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.set_advertised(token, property_id, True)
    return {"message": "Property advertised successfully", "property": prop.to_dict()}


@router.patch("/properties/{property_id}/remove-advertise")
def remove_advertise_property(
    property_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    prop = marketplace.properties.set_advertised(token, property_id, False)
    return {"message": "Property advertisement removed successfully", "property": prop.to_dict()}


# =============================================================================
# Moderation
# =============================================================================


@router.post("/properties/{property_id}/report")
def report_property(
    property_id: str,
    body: ReportRequest,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    report = marketplace.properties.report(
        token,
        property_id,
        body.report_description,
        reporter_name=body.reporter_name,
    )
    return {"message": "Property reported successfully", "report_id": report.report_id}


@router.get("/reports")
def list_reports(
    property_id: Optional[str] = Query(None),
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    reports = marketplace.properties.list_reports(token, property_id=property_id)
    return {
        "message": f"{len(reports)} reports",
        "reports": [r.to_dict() for r in reports],
    }
