"""
leasekeeper.template_library
============================

Built-in legal document templates and lookup helpers.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from .models import (
    LegalFramework,
    LegalTemplate,
    TemplateCategory,
    TemplateVariable,
    VariableType as VT,
)

_V = TemplateVariable

RTM_CLAIM_NOTICE = LegalTemplate(
    id="rtm-claim-notice",
    title="RTM Claim Notice",
    description="Notice of claim to acquire the right to manage under CLRA 2002",
    category=TemplateCategory.RTM_NOTICE,
    framework=LegalFramework.CLRA_2002,
    applicable_roles=("rtm-director",),
    version="2.0",
    last_updated=date(2024, 12, 1),
    content="""NOTICE OF CLAIM TO ACQUIRE THE RIGHT TO MANAGE

To: {{recipientName}}
{{recipientAddress}}

From: {{rtmCompanyName}}
Company Number: {{companyNumber}}
Registered Office: {{registeredOffice}}

Date: {{date}}

COMMONHOLD AND LEASEHOLD REFORM ACT 2002 - CHAPTER 1 OF PART 2

{{rtmCompanyName}} gives notice that it claims to acquire the right to manage {{buildingName}}, {{buildingAddress}} ("the premises").

DETAILS OF THE PREMISES:
{{premisesDescription}}

PARTICULARS OF THE CLAIM:
1. The premises contain {{totalFlats}} flats held by qualifying tenants
2. {{qualifyingTenants}} qualifying tenants are members of the company
3. The claim is made under section 79 of the Act

GROUNDS FOR THE CLAIM:
{{groundsForClaim}}

You may serve a counter-notice within one month of the date on which this notice is given if you dispute the claim.

The company intends to acquire the right to manage on {{acquisitionDate}}.

{{directorName}}
Director, {{rtmCompanyName}}""",
    variables=(
        _V("recipientName", VT.TEXT, True, "Name of recipient (landlord/freeholder)"),
        _V("recipientAddress", VT.ADDRESS, True, "Address of recipient"),
        _V("rtmCompanyName", VT.TEXT, True, "Name of RTM company"),
        _V("companyNumber", VT.TEXT, True, "Companies House registration number"),
        _V("registeredOffice", VT.ADDRESS, True, "Registered office address"),
        _V("date", VT.DATE, True, "Date of notice"),
        _V("buildingName", VT.TEXT, True, "Name of building"),
        _V("buildingAddress", VT.ADDRESS, True, "Address of building"),
        _V("premisesDescription", VT.TEXT, True, "Detailed description of premises"),
        _V("totalFlats", VT.NUMBER, True, "Total number of flats in building"),
        _V("qualifyingTenants", VT.NUMBER, True, "Number of qualifying tenants supporting claim"),
        _V("groundsForClaim", VT.TEXT, False, "Grounds for making the RTM claim",
           "The premises satisfy the qualifying conditions in section 72 of the Act."),
        _V("acquisitionDate", VT.DATE, True, "Intended acquisition date (at least three months after the counter-notice date)"),
        _V("directorName", VT.TEXT, True, "Name of RTM company director"),
    ),
)

SECTION_20_NOTICE_OF_INTENTION = LegalTemplate(
    id="section-20-notice-intention",
    title="Section 20 Notice of Intention",
    description="First stage consultation notice for major works under Section 20 LTA 1985",
    category=TemplateCategory.SECTION_20_CONSULTATION,
    framework=LegalFramework.LTA_1985,
    applicable_roles=("rtm-director", "rmc-director", "management-company"),
    version="2.1",
    last_updated=date(2024, 12, 1),
    content="""NOTICE OF INTENTION TO CARRY OUT WORKS

To: All Leaseholders of {{buildingName}}
From: {{senderName}}, {{senderTitle}}
Date: {{date}}

LANDLORD AND TENANT ACT 1985 - SECTION 20

We intend to carry out works to {{buildingName}}, {{buildingAddress}} and are required to consult you.

DESCRIPTION OF PROPOSED WORKS:
{{worksDescription}}

ESTIMATED TOTAL COST: £{{estimatedCost}}

REASONS FOR THE WORKS:
{{reasonsForWorks}}

You may make written observations within {{consultationDays}} days of the date of this notice, and you may propose a contractor from whom we should try to obtain an estimate.

Please send observations to:
{{contactName}}
{{contactAddress}}

{{senderName}}
{{companyName}}""",
    variables=(
        _V("buildingName", VT.TEXT, True, "Name of the building"),
        _V("buildingAddress", VT.ADDRESS, True, "Full address of the building"),
        _V("senderName", VT.TEXT, True, "Name of person sending notice"),
        _V("senderTitle", VT.TEXT, True, "Title/position of sender"),
        _V("companyName", VT.TEXT, True, "Name of RTM/RMC company"),
        _V("date", VT.DATE, True, "Date of notice"),
        _V("worksDescription", VT.TEXT, True, "Detailed description of proposed works"),
        _V("estimatedCost", VT.CURRENCY, True, "Total estimated cost of works"),
        _V("reasonsForWorks", VT.TEXT, True, "Reasons why works are necessary"),
        _V("consultationDays", VT.NUMBER, True, "Length of the consultation period in days", "30"),
        _V("contactName", VT.TEXT, True, "Contact person for observations"),
        _V("contactAddress", VT.ADDRESS, True, "Address for observations"),
    ),
)

AGM_NOTICE = LegalTemplate(
    id="agm-notice",
    title="Notice of Annual General Meeting",
    description="Notice to members of an RTM company annual general meeting",
    category=TemplateCategory.AGM_NOTICE,
    framework=LegalFramework.CLRA_2002,
    applicable_roles=("rtm-director", "rmc-director"),
    version="1.0",
    last_updated=date(2024, 12, 1),
    content="""NOTICE OF ANNUAL GENERAL MEETING

{{companyName}}

Notice is given that the annual general meeting of {{companyName}} will be held on {{meetingDate}} at {{meetingTime}} at {{meetingLocation}}.

AGENDA:
{{agenda}}

A member entitled to attend and vote may appoint a proxy to attend and vote instead of them.

By order of the board
{{secretaryName}}
Company Secretary""",
    variables=(
        _V("companyName", VT.TEXT, True, "Name of the company"),
        _V("meetingDate", VT.DATE, True, "Date of the meeting"),
        _V("meetingTime", VT.TEXT, True, "Start time"),
        _V("meetingLocation", VT.ADDRESS, False, "Venue or video link", "Online"),
        _V("agenda", VT.TEXT, True, "Agenda items"),
        _V("secretaryName", VT.TEXT, True, "Company secretary"),
    ),
)

LEGAL_TEMPLATES: List[LegalTemplate] = [
    SECTION_20_NOTICE_OF_INTENTION,
    RTM_CLAIM_NOTICE,
    AGM_NOTICE,
]


def get_template_by_id(template_id: str) -> Optional[LegalTemplate]:
    return next((t for t in LEGAL_TEMPLATES if t.id == template_id), None)


def get_templates_by_category(category: TemplateCategory | str) -> List[LegalTemplate]:
    return [t for t in LEGAL_TEMPLATES if str(t.category) == str(category)]


def get_templates_by_role(role: str) -> List[LegalTemplate]:
    return [t for t in LEGAL_TEMPLATES if role in t.applicable_roles]
