"""
Tests for province name handling and the ProvinceIndex.

Covers name normalization, shared identities for primary/alternate names,
unnamed features and the later-wins policy on normalized-name collisions.
"""
import pytest

from factories import collection, province
from peakmap.models import UNKNOWN_PROVINCE, parse_province_features
from peakmap.names import names_match, normalize_name, usable_name
from peakmap.provinces import ProvinceIndex


def build_index(*features):
    parsed, quarantined = parse_province_features(collection(list(features)))
    assert quarantined == []
    return ProvinceIndex.build(parsed)


class TestNames:
    def test_normalize_trims_and_lowercases(self):
        assert normalize_name("  Mountain Province ") == "mountain province"

    def test_names_match_ignores_case_and_outer_whitespace(self):
        assert names_match("IFUGAO", " ifugao")
        assert not names_match("Davao", "Davao del Sur")

    @pytest.mark.parametrize("value", [None, "", "   ", 42, ["Benguet"]])
    def test_unusable_names(self, value):
        assert usable_name(value) is None

    def test_usable_name_keeps_raw_form(self):
        assert usable_name(" Benguet ") == " Benguet "


class TestProvinceIndex:
    def test_primary_and_alternate_names_share_one_province(self):
        index = build_index(province("Ifugao", adm2_en="IFUGAO", feature_id="ifugao"))

        assert len(index) == 1
        assert index.lookup("Ifugao") is index.lookup("IFUGAO")
        assert index.lookup(" ifugao ").id == "ifugao"
        assert index.known_names() == ("Ifugao", "IFUGAO")

    def test_identical_alternate_name_is_registered_once(self):
        index = build_index(province("Benguet", adm2_en="Benguet"))

        assert index.known_names() == ("Benguet",)
        assert index.provinces[0].names == ["Benguet"]

    def test_every_input_name_resolves(self):
        features = [
            province("Abra", feature_id="abra"),
            province("Kalinga", adm2_en="KALINGA", feature_id="kalinga"),
            province("Apayao", adm2_en="apayao", feature_id="apayao"),
        ]
        index = build_index(*features)

        for feature in features:
            for key in ("name", "adm2_en"):
                name = feature["properties"].get(key)
                if name is not None:
                    assert index.lookup(normalize_name(name)) is not None

    def test_lookup_exact_requires_raw_name(self):
        index = build_index(province("Benguet"))

        assert index.lookup_exact("Benguet") is not None
        assert index.lookup_exact("benguet") is None
        assert index.lookup("benguet") is not None

    def test_unnamed_feature_is_kept_but_not_indexed(self):
        index = build_index(province(None), province("   "), province("Abra"))

        assert len(index) == 3
        assert index.known_names() == ("Abra",)
        assert index.provinces[0].display_name == UNKNOWN_PROVINCE
        assert "province-0" in index

    def test_missing_and_duplicate_ids_fall_back_to_position(self):
        index = build_index(
            province("Abra", feature_id="dup"),
            province("Kalinga", feature_id="dup"),
            province("Apayao"),
        )

        assert [p.id for p in index] == ["dup", "province-1", "province-2"]

    def test_collision_later_province_wins(self):
        index = build_index(
            province("Samar", feature_id="samar-a"),
            province(" SAMAR", feature_id="samar-b"),
        )

        assert index.lookup("samar").id == "samar-b"
        assert index.collisions == [("samar", "samar-a", "samar-b")]

    def test_annotate_adds_counts_and_ids_without_touching_input(self):
        raw = province("Benguet")
        parsed, _ = parse_province_features(collection([raw]))
        index = ProvinceIndex.build(parsed)
        index.provinces[0].mountain_count = 2

        annotated = index.annotate()

        feature = annotated["features"][0]
        assert feature["properties"]["mountainCount"] == 2
        assert feature["id"] == "province-0"
        assert "mountainCount" not in raw["properties"]
        assert "id" not in raw

    def test_empty_collection_builds_empty_index(self):
        parsed, _ = parse_province_features(None)
        index = ProvinceIndex.build(parsed)

        assert len(index) == 0
        assert index.annotate() == {"type": "FeatureCollection", "features": []}

    def test_exact_name_stays_with_registering_province(self):
        index = build_index(
            province("Davao", feature_id="a"),
            province("DAVAO", feature_id="b"),
        )

        assert index.lookup_exact("Davao").id == "a"
        assert index.lookup_exact("DAVAO").id == "b"
        assert index.lookup("davao").id == "b"
        assert [(name, p.id) for name, p in index.known_entries()] == [("Davao", "a"), ("DAVAO", "b")]

    def test_positional_identity_never_reuses_an_explicit_id(self):
        index = build_index(
            province("Abra", feature_id="province-1"),
            province("Benguet"),
        )

        ids = [p.id for p in index]
        assert ids == ["province-1", "province-1-1"]
        assert index.get("province-1").display_name == "Abra"
        assert index.get("province-1-1").display_name == "Benguet"
