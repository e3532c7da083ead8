"""
Organization Report Profile.

Static per-organization, per-year metadata printed on SYUUSHI07_01
(団体の基本情報). Owned by an external profile repository; the compiler
only reads and validates it.

Enumerated codes are kept as the raw strings the form uses:

    activity_area           "1" 2以上の都道府県 / "2" 1の都道府県
    public_position_type    "1".."4"
    diet relation type      "0" 該当なし / "1".."3"
    chamber                 "1" 衆議院 / "2" 参議院
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Self

ACTIVITY_AREAS: frozenset[str] = frozenset({"1", "2"})
DIET_RELATION_TYPES: frozenset[str] = frozenset({"0", "1", "2", "3"})
PUBLIC_POSITION_TYPES: frozenset[str] = frozenset({"1", "2", "3", "4"})
CHAMBERS: frozenset[str] = frozenset({"1", "2"})

MAX_CONTACT_PERSONS = 3
MAX_DIET_MEMBERS = 3


@dataclass(frozen=True)
class PersonName:
    last_name: str = ""
    first_name: str = ""


@dataclass(frozen=True)
class ContactPerson:
    """事務担当者."""

    id: str
    last_name: str = ""
    first_name: str = ""
    tel: str = ""


@dataclass(frozen=True)
class Period:
    """A date range already written in Wareki notation, e.g. ``R6/4/1``."""

    id: str
    from_date: str = ""
    to_date: str = ""


@dataclass(frozen=True)
class FundManagement:
    """資金管理団体の届出."""

    public_position_name: str = ""
    public_position_type: str = ""
    applicant: PersonName | None = None
    periods: tuple[Period, ...] = ()


@dataclass(frozen=True)
class DietMember:
    """国会議員関係政治団体の国会議員."""

    id: str
    last_name: str = ""
    first_name: str = ""
    chamber: str = ""
    position_type: str = ""


@dataclass(frozen=True)
class DietMemberRelation:
    type: str = "0"
    members: tuple[DietMember, ...] = ()
    periods: tuple[Period, ...] = ()


@dataclass(frozen=True)
class ProfileDetails:
    representative: PersonName | None = None
    accountant: PersonName | None = None
    contact_persons: tuple[ContactPerson, ...] = ()
    organization_type: str | None = None
    activity_area: str | None = None
    fund_management: FundManagement | None = None
    diet_member_relation: DietMemberRelation | None = None
    specific_party_date: str | None = None


@dataclass(frozen=True)
class OrganizationReportProfile:
    id: str
    political_organization_id: str
    financial_year: int
    official_name: str | None = None
    official_name_kana: str | None = None
    office_address: str | None = None
    office_address_building: str | None = None
    details: ProfileDetails = field(default_factory=ProfileDetails)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build a profile from the camelCase JSON document the admin UI stores."""
        details = data.get("details") or {}
        return cls(
            id=str(data["id"]),
            political_organization_id=str(data["politicalOrganizationId"]),
            financial_year=int(data["financialYear"]),
            official_name=data.get("officialName"),
            official_name_kana=data.get("officialNameKana"),
            office_address=data.get("officeAddress"),
            office_address_building=data.get("officeAddressBuilding"),
            details=_details_from_dict(details),
        )


def _name(data: dict[str, Any] | None) -> PersonName | None:
    if data is None:
        return None
    return PersonName(
        last_name=data.get("lastName", ""),
        first_name=data.get("firstName", ""),
    )


def _periods(items: list[dict[str, Any]] | None) -> tuple[Period, ...]:
    return tuple(
        Period(id=str(p.get("id", "")), from_date=p.get("from", ""), to_date=p.get("to", ""))
        for p in items or ()
    )


def _details_from_dict(data: dict[str, Any]) -> ProfileDetails:
    fund = data.get("fundManagement")
    relation = data.get("dietMemberRelation")
    return ProfileDetails(
        representative=_name(data.get("representative")),
        accountant=_name(data.get("accountant")),
        contact_persons=tuple(
            ContactPerson(
                id=str(c.get("id", "")),
                last_name=c.get("lastName", ""),
                first_name=c.get("firstName", ""),
                tel=c.get("tel", ""),
            )
            for c in data.get("contactPersons") or ()
        ),
        organization_type=data.get("organizationType"),
        activity_area=data.get("activityArea"),
        fund_management=None if fund is None else FundManagement(
            public_position_name=fund.get("publicPositionName", ""),
            public_position_type=fund.get("publicPositionType", ""),
            applicant=_name(fund.get("applicant")),
            periods=_periods(fund.get("periods")),
        ),
        diet_member_relation=None if relation is None else DietMemberRelation(
            type=relation.get("type", "0"),
            members=tuple(
                DietMember(
                    id=str(m.get("id", "")),
                    last_name=m.get("lastName", ""),
                    first_name=m.get("firstName", ""),
                    chamber=m.get("chamber", ""),
                    position_type=m.get("positionType", ""),
                )
                for m in relation.get("members") or ()
            ),
            periods=_periods(relation.get("periods")),
        ),
        specific_party_date=data.get("specificPartyDate"),
    )
