"""Unit tests for the document catalogue, required checklists and requirement check

Tests cover:
- Doc-type tag resolution (per-director police clearance)
- Singleton types
- Individual and organization submission checklists
- Eligibility and submission phases agreeing on which tags satisfy an entry
"""

import pytest

from domain.documents import (
    ChecklistPhase,
    DocumentCategory,
    DocumentType,
    MISSING_DOCUMENTS_REASON,
    RequirementContext,
    build_checklist,
    document_catalogue,
    get_policy,
    is_singleton,
    missing_items,
    police_clearance_tag,
    resolve_document_type,
    validate_document_requirements,
)
from models.application import ApplicationType


ORG_DOCS = [
    "certificate_incorporation",
    "bank_trust_letter",
    "cr6",
    "cr11",
    "tax_clearance",
    "annual_return_1",
    "annual_return_2",
    "annual_return_3",
]


class TestDocumentTypeResolution:
    def test_catalogue_tag(self):
        assert resolve_document_type("cr6") == DocumentType.CR6

    def test_police_clearance_with_index(self):
        assert resolve_document_type("police_clearance_director_3") == DocumentType.POLICE_CLEARANCE_DIRECTOR

    @pytest.mark.parametrize("tag", [
        "police_clearance_director",
        "police_clearance_director_0",
        "police_clearance_director_x",
        "selfie",
        "",
    ])
    def test_rejected_tags(self, tag):
        assert resolve_document_type(tag) is None

    def test_police_clearance_tag_builder(self):
        assert police_clearance_tag(2) == "police_clearance_director_2"

    def test_policy_shared_by_every_type(self):
        policy = get_policy("police_clearance_director_1")
        assert policy.category == DocumentCategory.IDENTITY
        assert policy.max_size_bytes == 20 * 1024 * 1024
        assert "image/svg+xml" in policy.allowed_mime_types

    def test_singletons(self):
        assert is_singleton("id_or_passport") is True
        assert is_singleton("birth_certificate") is True
        assert is_singleton("certificate_incorporation") is True
        assert is_singleton("o_level_cert") is False
        assert is_singleton("application_fee_pop") is False

    def test_catalogue_groups_by_category(self):
        catalogue = document_catalogue()
        assert set(catalogue) == {"education", "identity", "legal", "financial"}
        identity = {entry["docType"]: entry for entry in catalogue["identity"]}
        assert identity["id_or_passport"]["singleton"] is True


class TestIndividualChecklist:
    def test_mature_entry(self):
        labels = [i.label for i in build_checklist(
            ApplicationType.INDIVIDUAL, ChecklistPhase.SUBMISSION, mature_entry=True)]
        assert labels == ["O-Level Certificate", "ID or Passport", "Birth Certificate"]

    def test_non_mature_adds_qualification_first(self):
        checklist = build_checklist(ApplicationType.INDIVIDUAL, ChecklistPhase.SUBMISSION, mature_entry=False)
        assert checklist[0].doc_types == ("a_level_cert", "equivalent_cert")
        assert len(checklist) == 4

    def test_unknown_maturity_does_not_add_qualification(self):
        checklist = build_checklist(ApplicationType.INDIVIDUAL, ChecklistPhase.SUBMISSION, mature_entry=None)
        assert len(checklist) == 3

    def test_either_qualification_satisfies(self):
        check = validate_document_requirements(
            ApplicationType.INDIVIDUAL,
            ["equivalent_cert", "o_level_cert", "id_or_passport", "birth_certificate"],
            RequirementContext(mature_entry=False),
        )
        assert check.ok is True

    def test_missing_reported_in_order(self):
        check = validate_document_requirements(
            ApplicationType.INDIVIDUAL,
            ["id_or_passport"],
            RequirementContext(mature_entry=False),
        )
        assert check.ok is False
        assert check.reason == MISSING_DOCUMENTS_REASON
        assert check.requirements == [
            "A-Level certificate OR equivalent qualification evidence",
            "O-Level Certificate",
            "Birth Certificate",
        ]


class TestOrganizationChecklist:
    def test_director_count_defaults_to_one(self):
        check = validate_document_requirements(ApplicationType.ORGANIZATION, ORG_DOCS, RequirementContext())
        assert check.requirements == ["Police Clearance for Director 1"]

    def test_zero_directors_treated_as_one(self):
        checklist = build_checklist(ApplicationType.ORGANIZATION, ChecklistPhase.SUBMISSION, director_count=0)
        assert checklist[-1].doc_types == ("police_clearance_director_1",)

    def test_per_director_clearances(self):
        present = ORG_DOCS + ["police_clearance_director_1", "police_clearance_director_3"]
        check = validate_document_requirements(
            ApplicationType.ORGANIZATION, present, RequirementContext(director_count=3)
        )
        assert check.requirements == ["Police Clearance for Director 2"]

    def test_partnership_agreement_satisfies_incorporation_entry(self):
        present = [t for t in ORG_DOCS if t != "certificate_incorporation"] + [
            "partnership_agreement",
            "police_clearance_director_1",
        ]
        check = validate_document_requirements(
            ApplicationType.ORGANIZATION, present, RequirementContext(director_count=1)
        )
        assert check.ok is True

    def test_phases_agree_on_satisfying_tags(self):
        """A firm complete at the eligibility phase is complete at submission"""
        eligibility = build_checklist(
            ApplicationType.ORGANIZATION, ChecklistPhase.ELIGIBILITY, director_names=["Rudo", "Farai"]
        )
        submission = build_checklist(ApplicationType.ORGANIZATION, ChecklistPhase.SUBMISSION, director_count=2)

        assert sorted(i.doc_types for i in eligibility) == sorted(i.doc_types for i in submission)

        present = ORG_DOCS + ["police_clearance_director_1", "police_clearance_director_2"]
        assert missing_items(eligibility, present) == []
        assert missing_items(submission, present) == []
