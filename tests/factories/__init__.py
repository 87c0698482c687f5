"""Test data factories for the organization portal."""

from tests.factories.organization_factory import (
    make_organization,
    make_service,
    organization_payload,
    service_payload,
)
from tests.factories.user_factory import UserFactory, make_actor

__all__ = [
    "UserFactory",
    "make_actor",
    "make_organization",
    "make_service",
    "organization_payload",
    "service_payload",
]
