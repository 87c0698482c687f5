"""Tests for request/response schemas."""

import json

import pytest
from pydantic import ValidationError

from orgportal.schemas import (
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
    ServiceDraft,
    StatusUpdateRequest,
    SubmissionReviewRequest,
)
from tests.factories import make_organization, organization_payload, service_payload


class TestOrganizationCreate:
    def test_accepts_client_camel_case(self):
        body = OrganizationCreate.model_validate(organization_payload())

        assert body.institution_name == "Divisional Secretariat Colombo"
        assert body.contact.contact_number == "+94 11 2345678"
        assert [s.service_name for s in body.services] == ["Birth certificate", "Death certificate"]

    def test_accepts_snake_case(self):
        body = OrganizationCreate.model_validate({
            "province": "Central",
            "district": "Kandy",
            "institution_name": "Kandy MC",
            "contact": {
                "name": "B. Silva",
                "designation": "Commissioner",
                "email": "mc@kandy.example.gov",
                "contact_number": "0812222222",
            },
            "services": [],
        })
        assert body.services == []
        assert body.website_url is None

    def test_services_as_json_string(self):
        payload = organization_payload(services=json.dumps([service_payload("Trade licence")]))
        body = OrganizationCreate.model_validate(payload)
        assert body.services[0].service_name == "Trade licence"

    def test_malformed_services_string(self):
        with pytest.raises(ValidationError):
            OrganizationCreate.model_validate(organization_payload(services="[{not json"))

    def test_services_required(self):
        payload = organization_payload()
        del payload["services"]
        with pytest.raises(ValidationError):
            OrganizationCreate.model_validate(payload)

    def test_services_must_be_a_list(self):
        with pytest.raises(ValidationError):
            OrganizationCreate.model_validate(organization_payload(services={"a": 1}))

    def test_owner_in_body_is_ignored(self):
        body = OrganizationCreate.model_validate(organization_payload(owner_user_id="someone"))
        assert not hasattr(body, "owner_user_id")

    def test_invalid_email(self):
        payload = organization_payload()
        payload["personalDetails"]["email"] = "not-an-email"
        with pytest.raises(ValidationError):
            OrganizationCreate.model_validate(payload)


class TestServiceDraft:
    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ServiceDraft.model_validate(service_payload(serviceName="   "))

    def test_strips_whitespace(self):
        draft = ServiceDraft.model_validate(service_payload(serviceName="  Permit  "))
        assert draft.service_name == "Permit"


class TestOrganizationUpdate:
    def test_services_only(self):
        body = OrganizationUpdate.model_validate({"services": [service_payload()]})
        assert body.services_only is True

    def test_full_update(self):
        body = OrganizationUpdate.model_validate(organization_payload())
        assert body.services_only is False

    def test_full_update_without_services(self):
        payload = organization_payload()
        del payload["services"]
        body = OrganizationUpdate.model_validate(payload)
        assert body.services is None
        assert body.services_only is False

    def test_partial_update_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OrganizationUpdate.model_validate({"district": "Gampaha"})
        assert "Missing required fields" in str(exc_info.value)


class TestStatusRequests:
    def test_move_action(self):
        body = StatusUpdateRequest.model_validate({"status": "approved", "action": "move"})
        assert body.action == "move"

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            StatusUpdateRequest.model_validate({"status": "approved", "action": "copy"})

    def test_status_value_not_checked_here(self):
        body = StatusUpdateRequest.model_validate({"status": "bogus"})
        assert body.status == "bogus"

    def test_observed_status_alias(self):
        body = StatusUpdateRequest.model_validate({"status": "approved", "observedStatus": "pending"})
        assert body.observed_status == "pending"

    def test_reviewer_comments_alias(self):
        body = SubmissionReviewRequest.model_validate(
            {"status": "rejected", "reviewerComments": "Missing requirements"}
        )
        assert body.reviewer_comments == "Missing requirements"


class TestOrganizationResponse:
    def test_from_model_nests_contact(self):
        org = make_organization(status="approved", docx_url="/generated-docs/a.docx")

        response = OrganizationResponse.from_model(org)

        assert response.contact.name == "A. Perera"
        assert response.docx_url == "/generated-docs/a.docx"
        assert len(response.services) == 1
