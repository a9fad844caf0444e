# ruff: noqa: TC001
from __future__ import annotations

from pydantic import BaseModel, Field

from teamsched.schemas.leave import AnnualLeave, LeaveDay, LeaveRequest
from teamsched.schemas.schedule import Assignment, EmployeeLaborCode, Variation
from teamsched.schemas.work import Work


class EmployeeName(BaseModel):
    first: str = ""
    middle: str = ""
    last: str = ""
    suffix: str = ""

    @property
    def last_first(self) -> str:
        return f"{self.last}, {self.first}"

    @property
    def last_first_mi(self) -> str:
        if self.middle:
            return f"{self.last}, {self.first} {self.middle[0]}"
        return self.last_first


class CompanyInfo(BaseModel):
    """Company-side identifiers for the employee."""

    company: str = ""
    employee_id: str = ""
    alternate_id: str = ""
    job_title: str = ""
    rank: str = ""
    cost_center: str = ""
    division: str = ""


class Contact(BaseModel):
    id: int
    type_id: int
    value: str
    sort_id: int = 0


class Specialty(BaseModel):
    id: int
    specialty_id: int
    qualified: bool = False
    sort_id: int = 0


class EmployeeData(BaseModel):
    """Legacy collapsed payload that older documents nest under ``data``."""

    company_info: CompanyInfo = Field(default_factory=CompanyInfo)
    assignments: list[Assignment] = Field(default_factory=list)
    variations: list[Variation] = Field(default_factory=list)
    balances: list[AnnualLeave] = Field(default_factory=list)
    leaves: list[LeaveDay] = Field(default_factory=list)
    requests: list[LeaveRequest] = Field(default_factory=list)
    labor_codes: list[EmployeeLaborCode] = Field(default_factory=list)


class Employee(BaseModel):
    """Aggregate root: one employee and every record the scheduler owns for them.

    ``work`` is a read-only snapshot supplied by the caller and ``revision`` is
    the stored document version; neither is persisted in the payload.
    """

    id: str
    team_id: str = ""
    site_id: str = ""
    user_id: str = ""
    email: str = ""
    name: EmployeeName = Field(default_factory=EmployeeName)
    data: EmployeeData | None = None
    company_info: CompanyInfo = Field(default_factory=CompanyInfo)
    assignments: list[Assignment] = Field(default_factory=list)
    variations: list[Variation] = Field(default_factory=list)
    balances: list[AnnualLeave] = Field(default_factory=list)
    leaves: list[LeaveDay] = Field(default_factory=list)
    requests: list[LeaveRequest] = Field(default_factory=list)
    contact_info: list[Contact] = Field(default_factory=list)
    specialties: list[Specialty] = Field(default_factory=list)
    work: list[Work] = Field(default_factory=list, exclude=True)
    revision: int = Field(default=0, exclude=True)

    def find_request(self, request_id: str) -> LeaveRequest | None:
        for request in self.requests:
            if request.id == request_id:
                return request
        return None
