"""Tests for provider filtering, ranking and the local fallback lookup."""

from __future__ import annotations

from servicefinder.domain.models import Provider
from servicefinder.services.lookup import coerce_providers, local_search, match_providers
from servicefinder.services.seeds import FALLBACK_PROVIDER_RECORDS


def test_single_provider_match_reports_matching_services():
    providers = coerce_providers([{"id": "p1", "name": "Layla", "services": ["tutoring", "translation"]}])

    results = match_providers("tutoring", providers)

    assert len(results) == 1
    assert results[0].matching_services == ("tutoring",)
    assert results[0].model_dump(by_alias=True)["matchingServices"] == ("tutoring",)


def test_matching_is_case_insensitive_and_keeps_display_casing(provider_records):
    results = local_search("  PLUMBING", provider_records)

    assert [result.id for result in results] == ["p3", "p2"]
    assert results[0].matching_services == ("plumbing", "PLUMBING")
    assert results[1].matching_services == ("Plumbing",)
    assert results[0].relevance_score > results[1].relevance_score


def test_substring_services_do_not_match(provider_records):
    results = local_search("repair", provider_records)

    assert results == []


def test_malformed_documents_are_skipped_or_cleaned():
    records = [
        {"id": "a", "name": "No list", "services": "plumbing"},
        {"id": "b", "name": "Mixed", "services": [1, None, "", "plumbing"]},
        {"name": "Missing id", "services": ["plumbing"]},
        "not a document",
        {"id": 7, "name": "Numeric id", "services": ["plumbing"], "profileViews": None},
    ]

    results = local_search("plumbing", records)

    assert [result.id for result in results] == ["b", "7"]
    assert results[1].profile_views == 0


def test_services_are_capped_at_three():
    provider = Provider.model_validate(
        {"id": "x", "services": ["a", "b", "c", "d"]}
    )

    assert provider.services == ("a", "b", "c")


def test_local_search_accepts_keyed_bundle():
    bundle = {"users": {record["id"]: record for record in FALLBACK_PROVIDER_RECORDS}}

    results = local_search("catering", bundle)

    assert [result.name for result in results] == ["Omar Abdullah"]


def test_local_search_uses_mapping_keys_as_ids():
    results = local_search("cooking", {"omar": {"name": "Omar", "services": ["cooking"]}})

    assert results[0].id == "omar"


def test_local_search_never_fails_on_bad_input():
    assert local_search("plumbing", None) == []
    assert local_search("plumbing", 42) == []
    assert local_search("plumbing", "plumbing") == []
    assert local_search("", FALLBACK_PROVIDER_RECORDS) == []
    assert local_search(None, FALLBACK_PROVIDER_RECORDS) == []
