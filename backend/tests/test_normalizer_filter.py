"""Name normalizer and generic-name filter tests."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from geo_visibility.schemas.competitor_schema import CompetitorCandidate
from geo_visibility.services.competitor_cleaner import (
    filter_generic,
    is_generic_name,
    is_rejected_at_collection,
)
from geo_visibility.services.competitor_normalizer import dedupe_names, normalize_name


class TestNormalizeName:
    @pytest.mark.parametrize("raw, expected", [
        ("HubSpot", "hubspot"),
        ("  HubSpot  ", "hubspot"),
        ("Hub   Spot\tInc.", "hub spot inc"),
        ("Salesforce!", "salesforce"),
        ("Visma.,;:!?", "visma"),
        ("Acme .", "acme"),
        ("", ""),
        ("...", ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_name(raw) == expected

    @pytest.mark.parametrize("raw", [
        "HubSpot", "  Hub  Spot. ", "Acme . ,", "Ünïcode Åb!", "a.b.c.", " ? ! ", "Zendesk\n", "x  .  y  .",
    ])
    def test_idempotent(self, raw):
        once = normalize_name(raw)
        assert normalize_name(once) == once

    def test_internal_punctuation_kept(self):
        assert normalize_name("Monday.com") == "monday.com"

    def test_dedupe_keeps_first_spelling(self):
        assert dedupe_names(["HubSpot", "hubspot.", "Salesforce", " HUBSPOT "]) == ["HubSpot", "Salesforce"]


class TestGenericNameFilter:
    @pytest.mark.parametrize("name", [
        "Global CRM Solutions",
        "Other providers",
        "Enterprise platforms",
        "Local car dealerships and others",
        "Various tools",
        "Nordic accounting software",
        "Bilia, Hedin etc.",
        "Professional Services",
    ])
    def test_rejects_generic(self, name):
        assert is_generic_name(name)

    @pytest.mark.parametrize("name", ["Salesforce", "HubSpot", "Visma", "Fortnox", "Monday.com", "Topdesk"])
    def test_accepts_entities(self, name):
        assert not is_generic_name(name)

    def test_filter_keeps_order(self):
        candidates = [
            CompetitorCandidate(name=n, normalized_key=normalize_name(n), confidence=0.7)
            for n in ["HubSpot", "Other providers", "Salesforce", "Enterprise platforms", "Visma"]
        ]
        kept = filter_generic(candidates)
        assert [c.name for c in kept] == ["HubSpot", "Salesforce", "Visma"]


class TestCollectionRejects:
    @pytest.mark.parametrize("name", ["ab", "X", "providers", "Solutions", "platforms.", "TOOLS", "software"])
    def test_rejected(self, name):
        assert is_rejected_at_collection(name)

    @pytest.mark.parametrize("name", ["IBM", "HubSpot", "Software AG", "Tool Co"])
    def test_kept(self, name):
        assert not is_rejected_at_collection(name)
