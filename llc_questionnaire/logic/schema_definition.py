"""Declarative definition of the LLC formation questionnaire.

Plain data only. Product-gated sections:
- LLC formation (base): basic_info, members, management, review
- ein: tax, ein
- operating_agreement: operating_agreement
- registered_agent: registered_agent
- bank_resolution: bank_resolution
"""

from __future__ import annotations

from typing import Any, Dict, List

_ALWAYS: Dict[str, Any] = {"type": "always"}


def _answer(question_id: str, value: Any, operator: str = "equals") -> Dict[str, Any]:
    return {"type": "answer", "question_id": question_id, "answer_value": value, "operator": operator}


def _product(name: str) -> Dict[str, Any]:
    return {"type": "product", "product": name}


def _yes_no() -> List[Dict[str, str]]:
    return [{"value": "yes", "label": "Yes"}, {"value": "no", "label": "No"}]


SCHEMA_DEFINITION: List[Dict[str, Any]] = [
    {
        "id": "basic_info",
        "title": "Basic Business Information",
        "description": "Confirm and complete your business details",
        "order": 1,
        "visibility": _ALWAYS,
        "questions": [
            {
                "id": "business_name",
                "type": "text",
                "label": "Desired Business Name",
                "help_text": 'This should match what you entered during checkout. Do not include "LLC" - we will add it.',
                "required": True,
                "pre_populate_from": "companyName",
                "validation": [
                    {"type": "required", "message": "Business name is required"},
                    {"type": "minLength", "value": 2, "message": "Business name must be at least 2 characters"},
                    {"type": "maxLength", "value": 100, "message": "Business name must be less than 100 characters"},
                ],
            },
            {
                "id": "business_address",
                "type": "address",
                "label": "Business Address",
                "help_text": "The principal place of business for your LLC",
                "required": True,
                "pre_populate_from": "businessAddress",
            },
            {
                "id": "mailing_address_same",
                "type": "radio",
                "label": "Is your mailing address the same as your business address?",
                "required": True,
                "options": [
                    {"value": "yes", "label": "Yes, use the same address"},
                    {"value": "no", "label": "No, I have a different mailing address"},
                ],
                "default_value": "yes",
            },
            {
                "id": "mailing_address",
                "type": "address",
                "label": "Mailing Address",
                "required": True,
                "visibility": _answer("mailing_address_same", "no"),
            },
            {
                "id": "business_purpose",
                "type": "textarea",
                "label": "Business Purpose",
                "help_text": (
                    'Describe the primary activities of your business. Example: "To engage in any lawful '
                    'business activity" or be specific like "To provide consulting services in the field of technology"'
                ),
                "required": True,
                "pre_populate_from": "businessPurpose",
                "validation": [
                    {"type": "required", "message": "Business purpose is required"},
                    {"type": "minLength", "value": 10, "message": "Please provide a more detailed description"},
                ],
            },
        ],
    },
    {
        "id": "members",
        "title": "Ownership (Member Information)",
        "description": "Add all members (owners) of the LLC",
        "order": 2,
        "visibility": _ALWAYS,
        "questions": [
            {
                "id": "member_count",
                "type": "radio",
                "label": "How many owners will your LLC have?",
                "required": True,
                "options": [
                    {"value": "single", "label": "Single Member (just me)", "description": "You are the only owner"},
                    {"value": "multi", "label": "Multiple Members", "description": "Two or more owners"},
                ],
                "default_value": "single",
            },
            {
                "id": "member_list",
                "type": "member_list",
                "label": "LLC Members",
                "help_text": (
                    "Add all individuals or entities that will own the LLC. "
                    "Ownership percentages must total 100%."
                ),
                "required": True,
                "pre_populate_from": "members",
                "member_fields": [
                    {
                        "id": "member_type",
                        "type": "radio",
                        "label": "Member Type",
                        "required": True,
                        "options": [
                            {"value": "individual", "label": "Individual"},
                            {"value": "entity", "label": "Business Entity"},
                        ],
                    },
                    {
                        "id": "full_name",
                        "type": "text",
                        "label": "Full Legal Name",
                        "required": True,
                        "help_text": "For individuals: your full legal name. For entities: the entity's legal name.",
                    },
                    {
                        "id": "entity_type",
                        "type": "select",
                        "label": "Entity Type",
                        "required": True,
                        "visibility": _answer("member_type", "entity"),
                        "options": [
                            {"value": "llc", "label": "LLC"},
                            {"value": "corporation", "label": "Corporation"},
                            {"value": "partnership", "label": "Partnership"},
                            {"value": "trust", "label": "Trust"},
                        ],
                    },
                    {"id": "street_address", "type": "text", "label": "Street Address", "required": True},
                    {"id": "city", "type": "text", "label": "City", "required": True},
                    {"id": "state", "type": "text", "label": "State", "required": True},
                    {"id": "zip_code", "type": "text", "label": "ZIP Code", "required": True},
                    {"id": "email", "type": "email", "label": "Email Address", "required": True},
                    {"id": "phone", "type": "phone", "label": "Phone Number", "required": True},
                    {
                        "id": "ownership_percentage",
                        "type": "number",
                        "label": "Ownership Percentage",
                        "required": True,
                        "min": 0.01,
                        "max": 100,
                        "help_text": "For single-member LLCs, this will be 100%",
                    },
                    {
                        "id": "ssn",
                        "type": "text",
                        "label": "Social Security Number (SSN)",
                        "help_text": "Required for tax purposes. Format: XXX-XX-XXXX",
                        "required": True,
                        "visibility": _answer("member_type", "individual"),
                    },
                    {
                        "id": "ein",
                        "type": "text",
                        "label": "Employer Identification Number (EIN)",
                        "help_text": "The entity's EIN. Format: XX-XXXXXXX",
                        "required": True,
                        "visibility": _answer("member_type", "entity"),
                    },
                ],
            },
        ],
    },
    {
        "id": "management",
        "title": "Management Structure",
        "description": "Define how your LLC will be managed",
        "order": 3,
        "visibility": _ALWAYS,
        "questions": [
            {
                "id": "management_type",
                "type": "radio",
                "label": "How will the LLC be managed?",
                "help_text": (
                    "Member-Managed: All members participate in daily operations. Manager-Managed: "
                    "Designated manager(s) handle operations while members are passive investors."
                ),
                "required": True,
                "options": [
                    {
                        "value": "member_managed",
                        "label": "Member-Managed",
                        "description": "All members participate in running the business",
                    },
                    {
                        "value": "manager_managed",
                        "label": "Manager-Managed",
                        "description": "One or more designated managers run the business",
                    },
                ],
                "default_value": "member_managed",
            },
            {
                "id": "managers",
                "type": "member_list",
                "label": "Manager(s)",
                "help_text": "List all managers. Managers can be members or outside individuals.",
                "required": True,
                "visibility": _answer("management_type", "manager_managed"),
                "member_fields": [
                    {"id": "manager_name", "type": "text", "label": "Manager Full Name", "required": True},
                    {
                        "id": "is_member",
                        "type": "radio",
                        "label": "Is this manager also a member?",
                        "options": _yes_no(),
                    },
                    {"id": "manager_street", "type": "text", "label": "Street Address", "required": True},
                    {"id": "manager_city", "type": "text", "label": "City", "required": True},
                    {"id": "manager_state", "type": "text", "label": "State", "required": True},
                    {"id": "manager_zip", "type": "text", "label": "ZIP Code", "required": True},
                ],
            },
        ],
    },
    {
        "id": "tax",
        "title": "Tax Classification",
        "description": "Important tax decisions for your LLC",
        "order": 4,
        "visibility": _product("ein"),
        "questions": [
            {
                "id": "tax_classification",
                "type": "radio",
                "label": "Tax Classification",
                "help_text": (
                    "Most LLCs are taxed as partnerships (pass-through). "
                    "Consult a tax professional for your specific situation."
                ),
                "required": True,
                "options": [
                    {
                        "value": "default",
                        "label": "Default Tax Treatment",
                        "description": "Single-member: Disregarded entity. Multi-member: Partnership.",
                    },
                    {
                        "value": "s_corp",
                        "label": "S-Corporation Election",
                        "description": "Pass-through with potential self-employment tax savings",
                    },
                    {"value": "c_corp", "label": "C-Corporation Election", "description": "LLC taxed as a corporation"},
                ],
                "default_value": "default",
            },
            {
                "id": "fiscal_year_end",
                "type": "radio",
                "label": "Fiscal Year End",
                "required": True,
                "options": [
                    {"value": "december_31", "label": "December 31st (calendar year - typical)"},
                    {"value": "other", "label": "Other fiscal year end"},
                ],
                "default_value": "december_31",
            },
            {
                "id": "fiscal_year_end_date",
                "type": "date",
                "label": "Fiscal Year End Date",
                "required": True,
                "visibility": _answer("fiscal_year_end", "other"),
            },
        ],
    },
    {
        "id": "ein",
        "title": "EIN Application Information",
        "description": "Information needed to obtain your Employer Identification Number",
        "order": 5,
        "visibility": _product("ein"),
        "questions": [
            {
                "id": "responsible_party_name",
                "type": "text",
                "label": "Responsible Party (Full Name)",
                "help_text": (
                    "The individual who has authority over the LLC's finances. "
                    "This must be an individual, not an entity."
                ),
                "required": True,
                "pre_populate_from": "contactName",
            },
            {
                "id": "responsible_party_ssn",
                "type": "text",
                "label": "Social Security Number (SSN)",
                "help_text": "Required by IRS to process EIN application. This information is encrypted and secure.",
                "required": True,
                "validation": [
                    {"type": "required", "message": "SSN is required for EIN application"},
                    {
                        "type": "pattern",
                        "value": r"^\d{3}-?\d{2}-?\d{4}$",
                        "message": "Please enter a valid SSN format (XXX-XX-XXXX)",
                    },
                ],
            },
            {
                "id": "expect_employees",
                "type": "radio",
                "label": "Do you expect to have employees in the next 12 months?",
                "required": True,
                "options": _yes_no(),
                "default_value": "no",
            },
            {
                "id": "highest_employee_count",
                "type": "select",
                "label": "Highest number of employees expected",
                "required": True,
                "visibility": _answer("expect_employees", "yes"),
                "options": [
                    {"value": "1-4", "label": "1-4"},
                    {"value": "5-9", "label": "5-9"},
                    {"value": "10-19", "label": "10-19"},
                    {"value": "20-49", "label": "20-49"},
                    {"value": "50+", "label": "50 or more"},
                ],
            },
        ],
    },
    {
        "id": "operating_agreement",
        "title": "Operating Agreement Details",
        "description": "Customize your operating agreement",
        "order": 6,
        "visibility": _product("operating_agreement"),
        "questions": [
            {
                "id": "profit_allocation",
                "type": "radio",
                "label": "How will profits and losses be allocated?",
                "required": True,
                "visibility": _answer("member_count", "multi"),
                "options": [
                    {
                        "value": "proportional",
                        "label": "Proportional to ownership",
                        "description": "Each member receives their ownership percentage",
                    },
                    {
                        "value": "equal",
                        "label": "Equal share to all members",
                        "description": "Each member gets the same share regardless of ownership",
                    },
                ],
                "default_value": "proportional",
            },
            {
                "id": "distribution_schedule",
                "type": "radio",
                "label": "When will profits be distributed?",
                "required": True,
                "options": [
                    {"value": "as_determined", "label": "As determined by members/managers"},
                    {"value": "quarterly", "label": "Quarterly"},
                    {"value": "annually", "label": "Annually"},
                    {"value": "monthly", "label": "Monthly"},
                ],
                "default_value": "as_determined",
            },
            {
                "id": "voting_rights",
                "type": "radio",
                "label": "How will member votes be determined?",
                "required": True,
                "visibility": _answer("member_count", "multi"),
                "options": [
                    {
                        "value": "by_ownership",
                        "label": "By ownership share",
                        "description": "Votes weighted by ownership percentage",
                    },
                    {
                        "value": "equal",
                        "label": "Equal vote for each member",
                        "description": "Each member gets one vote regardless of ownership",
                    },
                ],
                "default_value": "by_ownership",
            },
            {
                "id": "allow_new_members",
                "type": "radio",
                "label": "Can new members be admitted in the future?",
                "required": True,
                "options": [
                    {"value": "yes_unanimous", "label": "Yes - Unanimous vote required"},
                    {"value": "yes_majority", "label": "Yes - Majority vote required"},
                    {"value": "no", "label": "No - No new members allowed"},
                ],
                "default_value": "yes_unanimous",
            },
            {
                "id": "allow_transfer",
                "type": "radio",
                "label": "Can members transfer their ownership to non-members?",
                "required": True,
                "visibility": _answer("member_count", "multi"),
                "options": [
                    {"value": "yes_rofr", "label": "Yes - But other members have right of first refusal"},
                    {"value": "yes_approval", "label": "Yes - But requires approval from other members"},
                    {"value": "no", "label": "No - Transfers to non-members not allowed"},
                ],
                "default_value": "yes_rofr",
            },
        ],
    },
    {
        "id": "registered_agent",
        "title": "Registered Agent Information",
        "description": "Your LLC's official contact for legal documents",
        "order": 7,
        "visibility": _product("registered_agent"),
        "questions": [
            {
                "id": "ra_selection",
                "type": "radio",
                "label": "Registered Agent Service",
                "required": True,
                "options": [
                    {
                        "value": "our_service",
                        "label": "Use our Registered Agent Service",
                        "description": "We handle all legal document delivery for you",
                    },
                    {
                        "value": "self",
                        "label": "I will be my own registered agent",
                        "description": (
                            "You must have a physical address in the state and be available during business hours"
                        ),
                    },
                    {"value": "other", "label": "I have another registered agent"},
                ],
                "default_value": "our_service",
            },
            {
                "id": "ra_name",
                "type": "text",
                "label": "Registered Agent Name",
                "required": True,
                "visibility": _answer("ra_selection", "other"),
            },
            {
                "id": "ra_address",
                "type": "address",
                "label": "Registered Agent Address",
                "help_text": "Must be a physical address in the state of formation (no P.O. boxes)",
                "required": True,
                "visibility": {
                    "type": "compound",
                    "logic": "or",
                    "conditions": [_answer("ra_selection", "self"), _answer("ra_selection", "other")],
                },
            },
        ],
    },
    {
        "id": "bank_resolution",
        "title": "Bank Resolution Information",
        "description": "Information needed for your banking authorization documents",
        "order": 8,
        "visibility": _product("bank_resolution"),
        "questions": [
            {
                "id": "bank_name",
                "type": "text",
                "label": "Bank Name (if known)",
                "help_text": "Leave blank if you haven't chosen a bank yet",
                "required": False,
            },
            {
                "id": "authorized_signers_count",
                "type": "radio",
                "label": "How many people will be authorized to sign checks?",
                "required": True,
                "options": [
                    {"value": "one", "label": "One person"},
                    {"value": "multiple", "label": "Multiple people"},
                ],
                "default_value": "one",
            },
            {
                "id": "dual_signature_required",
                "type": "radio",
                "label": "Require two signatures for large transactions?",
                "required": True,
                "visibility": _answer("authorized_signers_count", "multiple"),
                "options": [
                    {"value": "no", "label": "No - Single signature always sufficient"},
                    {"value": "yes", "label": "Yes - Require two signatures over a threshold"},
                ],
                "default_value": "no",
            },
            {
                "id": "dual_signature_threshold",
                "type": "currency",
                "label": "Dual signature required for amounts over:",
                "required": True,
                "visibility": _answer("dual_signature_required", "yes"),
            },
        ],
    },
    {
        "id": "review",
        "title": "Review & Submit",
        "description": "Review your information before submitting",
        "order": 9,
        "visibility": _ALWAYS,
        "questions": [
            {
                "id": "confirmation",
                "type": "checkbox",
                "label": (
                    "I confirm that all information provided is accurate and complete "
                    "to the best of my knowledge."
                ),
                "required": True,
            },
            {
                "id": "terms_agreement",
                "type": "checkbox",
                "label": (
                    "I understand that this information will be used to prepare my LLC formation documents "
                    "and that I may be contacted for clarification if needed."
                ),
                "required": True,
            },
        ],
    },
]


__all__ = ["SCHEMA_DEFINITION"]
