"""Metadata router - API endpoints for picklist values (enums)."""

from fastapi import APIRouter, Depends

from portal.core.deps import get_current_principal
from portal.core.role_rules import role_display_name
from portal.core.status_engine import (
    broker_label,
    broker_style_class,
    get_valid_broker_transitions,
    get_valid_transitions,
    is_terminal,
    is_terminal_broker,
    label,
    style_class,
)
from portal.db.enums import DEFAULT_BROKER_STATUS, DEFAULT_QUOTE_STATUS, BrokerStatus, QuoteStatus, Role
from portal.schemas.auth import Principal

router = APIRouter()


@router.get("/statuses")
def list_quote_statuses(
    principal: Principal = Depends(get_current_principal),
):
    """
    Get all quote statuses with metadata.

    Returns list of {value, label, style_class, terminal, next} for dropdowns
    and status badges.
    """
    statuses = [
        {
            "value": status.value,
            "label": label(status),
            "style_class": style_class(status),
            "terminal": is_terminal(status),
            "next": [s.value for s in QuoteStatus if s in get_valid_transitions(status)],
        }
        for status in QuoteStatus
    ]
    return {"statuses": statuses, "default": DEFAULT_QUOTE_STATUS.value}


@router.get("/broker-statuses")
def list_broker_statuses(
    principal: Principal = Depends(get_current_principal),
):
    """Get all broker statuses with metadata (same shape as /statuses)."""
    statuses = [
        {
            "value": status.value,
            "label": broker_label(status),
            "style_class": broker_style_class(status),
            "terminal": is_terminal_broker(status),
            "next": [s.value for s in BrokerStatus if s in get_valid_broker_transitions(status)],
        }
        for status in BrokerStatus
    ]
    return {"statuses": statuses, "default": DEFAULT_BROKER_STATUS.value}


@router.get("/roles")
def list_roles(
    principal: Principal = Depends(get_current_principal),
):
    """
    Get all user roles.

    Returns list of {value, label} for populating dropdowns.
    """
    roles = [{"value": role.value, "label": role_display_name(role)} for role in Role]
    return {"roles": roles}
