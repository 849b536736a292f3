"""
Catalog lookups consumed by the service-order store.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from apps.core.exceptions import NotFoundError

from .models import Service


@dataclass(frozen=True)
class ServiceSnapshot:
    """Price and routing of a catalog service at the moment it is read."""
    id: int
    code: str
    name: str
    unit_price: Decimal
    group_id: int
    type_name: Optional[str]
    execution_room_id: Optional[int]
    requires_result: bool


def get_service(service_id) -> ServiceSnapshot:
    try:
        service = Service.objects.select_related(
            "group__service_type", "service_type"
        ).get(pk=service_id)
    except Service.DoesNotExist:
        raise NotFoundError(
            message="Service not found",
            detail=f"No catalog service with id {service_id}.",
            code="SERVICE_NOT_FOUND",
        )

    return ServiceSnapshot(
        id=service.id,
        code=service.code,
        name=service.name,
        unit_price=service.unit_price,
        group_id=service.group_id,
        type_name=service.type_name,
        execution_room_id=service.execution_room_id,
        requires_result=service.requires_result,
    )
