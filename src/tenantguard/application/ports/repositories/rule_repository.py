"""Business rule repository port."""

from typing import Protocol
from uuid import UUID

from tenantguard.domain.entities import BusinessRule
from tenantguard.domain.value_objects import SubjectRef


class RuleRepository(Protocol):
    """Port for business rule persistence."""

    async def list_for_subjects(
        self,
        business_id: UUID,
        subjects: list[SubjectRef],
        permission_id: UUID,
    ) -> list[BusinessRule]: ...

    async def list_for_business(
        self,
        business_id: UUID,
        *,
        subject: SubjectRef | None = None,
        permission_id: UUID | None = None,
    ) -> list[BusinessRule]: ...

    async def get_by_id(self, business_id: UUID, rule_id: UUID) -> BusinessRule | None: ...

    async def create(self, rule: BusinessRule) -> BusinessRule: ...

    async def delete(self, business_id: UUID, rule_id: UUID) -> None: ...
