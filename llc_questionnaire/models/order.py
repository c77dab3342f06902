"""Read-only view of an upstream order, as consumed by the questionnaire."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class OrderRecord(BaseModel):
    id: str
    order_number: str
    user_id: Optional[str] = None
    company_name: Optional[str] = None
    business_purpose: Optional[str] = None
    business_address: Optional[str] = None
    business_city: Optional[str] = None
    business_state: Optional[str] = None
    business_zip: Optional[str] = None
    contact_first_name: Optional[str] = None
    contact_last_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_address: Optional[str] = None
    formation_state: Optional[str] = None
    # Purchased add-ons
    need_ein: bool = False
    need_operating_agreement: bool = False
    need_bank_letter: bool = False
    registered_agent: bool = False
    compliance: bool = False


__all__ = ["OrderRecord"]
