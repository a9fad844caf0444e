"""Contact details and specialties on the employee record."""

from __future__ import annotations

from typing import TYPE_CHECKING

from teamsched.schemas.employee import Contact, Specialty

if TYPE_CHECKING:
    from teamsched.schemas.employee import Employee


def _sort_contacts(employee: Employee) -> None:
    employee.contact_info.sort(key=lambda c: (c.sort_id, c.id))


def _sort_specialties(employee: Employee) -> None:
    employee.specialties.sort(key=lambda s: (s.sort_id, s.id))


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------


def add_contact(employee: Employee, type_id: int, value: str, sort_id: int = 0) -> Contact:
    """Set the value for a contact type, adding the contact if it is new."""
    for contact in employee.contact_info:
        if contact.type_id == type_id:
            contact.value = value
            return contact
    contact = Contact(
        id=max((c.id for c in employee.contact_info), default=-1) + 1,
        type_id=type_id,
        value=value,
        sort_id=sort_id,
    )
    employee.contact_info.append(contact)
    _sort_contacts(employee)
    return contact


def resort_contacts(employee: Employee, sort_ids: dict[int, int]) -> None:
    """Apply a team's display order, keyed by contact type."""
    for contact in employee.contact_info:
        if contact.type_id in sort_ids:
            contact.sort_id = sort_ids[contact.type_id]
    _sort_contacts(employee)


def delete_contact(employee: Employee, contact_id: int) -> None:
    employee.contact_info = [c for c in employee.contact_info if c.id != contact_id]


def delete_contact_by_type(employee: Employee, type_id: int) -> None:
    employee.contact_info = [c for c in employee.contact_info if c.type_id != type_id]


# ---------------------------------------------------------------------------
# Specialties
# ---------------------------------------------------------------------------


def add_specialty(employee: Employee, specialty_id: int, qualified: bool, sort_id: int = 0) -> Specialty:
    for specialty in employee.specialties:
        if specialty.specialty_id == specialty_id:
            specialty.qualified = qualified
            return specialty
    specialty = Specialty(
        id=max((s.id for s in employee.specialties), default=-1) + 1,
        specialty_id=specialty_id,
        qualified=qualified,
        sort_id=sort_id,
    )
    employee.specialties.append(specialty)
    _sort_specialties(employee)
    return specialty


def resort_specialties(employee: Employee, sort_ids: dict[int, int]) -> None:
    for specialty in employee.specialties:
        if specialty.specialty_id in sort_ids:
            specialty.sort_id = sort_ids[specialty.specialty_id]
    _sort_specialties(employee)


def delete_specialty(employee: Employee, record_id: int) -> None:
    employee.specialties = [s for s in employee.specialties if s.id != record_id]


def delete_specialty_by_type(employee: Employee, specialty_id: int) -> None:
    employee.specialties = [s for s in employee.specialties if s.specialty_id != specialty_id]


def has_specialty(employee: Employee, specialty_id: int) -> bool:
    return any(s.specialty_id == specialty_id for s in employee.specialties)
