"""Initial responses and product list derived from an upstream order.

Invoked once, when the questionnaire instance is created. Pure functions of
the order record.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from llc_questionnaire.models.order import OrderRecord

# Trailing entity designator as a separate word, e.g. "Acme LLC" / "Acme L.L.C."
_ENTITY_SUFFIX_RE = re.compile(r"(?:^|\s+)(?:LLC|L\.L\.C\.)\s*$", re.IGNORECASE)

BASE_PRODUCT = "llc"

# Order add-on flag -> product key, in the order products are listed
_ADD_ON_PRODUCTS = (
    ("need_ein", "ein"),
    ("need_operating_agreement", "operating_agreement"),
    ("need_bank_letter", "bank_resolution"),
    ("registered_agent", "registered_agent"),
    ("compliance", "annual_compliance"),
)


def strip_entity_suffix(company_name: Optional[str]) -> Optional[str]:
    if company_name is None:
        return None
    return _ENTITY_SUFFIX_RE.sub("", company_name, count=1).strip()


def determine_products(order: OrderRecord) -> List[str]:
    products = [BASE_PRODUCT]
    for flag, product in _ADD_ON_PRODUCTS:
        if getattr(order, flag, False):
            products.append(product)
    return products


def _full_name(order: OrderRecord) -> str:
    return f"{order.contact_first_name or ''} {order.contact_last_name or ''}".strip()


def build_initial_responses(order: OrderRecord) -> Dict[str, Any]:
    """Flatten order fields into response keys the schema expects.

    The purchaser is seeded as the single 100% individual member.
    """
    contact_name = _full_name(order)
    return {
        "business_name": strip_entity_suffix(order.company_name),
        "business_purpose": order.business_purpose,
        "business_address": {
            "street": order.business_address,
            "city": order.business_city,
            "state": order.business_state,
            "zipCode": order.business_zip,
        },
        "responsible_party_name": contact_name,
        "contactName": contact_name,
        "member_list": [
            {
                "member_type": "individual",
                "full_name": contact_name,
                "email": order.contact_email,
                "phone": order.contact_phone or "",
                "street_address": order.contact_address or order.business_address,
                "city": order.business_city,
                "state": order.business_state,
                "zip_code": order.business_zip,
                "ownership_percentage": 100,
            }
        ],
        "ra_selection": "our_service" if order.registered_agent else "self",
    }


__all__ = [
    "BASE_PRODUCT",
    "strip_entity_suffix",
    "determine_products",
    "build_initial_responses",
]
