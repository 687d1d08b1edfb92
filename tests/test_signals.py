import logging

from attribution_resolver.models import ClickIds, RawInput, UtmParams
from attribution_resolver.options import ConsentPolicy
from attribution_resolver.signals import (
    apply_consent_to_click_ids,
    extract_click_ids,
    extract_utms,
    normalize_click_ids,
    normalize_input,
    normalize_utms,
    normalize_value,
)


def test_normalize_input_trims_and_nulls_blank_values():
    raw = normalize_input({"page_location": "  https://example.com/  ", "page_referrer": "   "})
    assert raw == RawInput(page_location="https://example.com/", page_referrer=None)


def test_normalize_input_tolerates_malformed_input():
    assert normalize_input(None) == RawInput()
    assert normalize_input("https://example.com/") == RawInput()
    assert normalize_input(["page_location"]) == RawInput()
    assert normalize_input({"page_location": 123, "page_referrer": None}) == RawInput()
    assert normalize_input({}) == RawInput()


def test_normalize_input_accepts_raw_input_instances():
    raw = normalize_input(RawInput(page_location=" https://a.com ", page_referrer=""))
    assert raw == RawInput(page_location="https://a.com", page_referrer=None)


def test_extractors_only_pick_known_keys_and_leave_missing_absent():
    params = {"gclid": "abc", "utm_source": "news", "foo": "bar"}
    click_ids = extract_click_ids(params)
    utm = extract_utms(params)
    assert click_ids.to_dict() == {"gclid": "abc"}
    assert utm.to_dict() == {"utm_source": "news"}


def test_normalize_value_filters_blank_and_sentinels():
    assert normalize_value("  abc ") == "abc"
    assert normalize_value("") is None
    assert normalize_value("   ") is None
    assert normalize_value(None) is None
    assert normalize_value("null") is None
    assert normalize_value("UNDEFINED") is None
    assert normalize_value(" (Not Set) ") is None
    assert normalize_value(42) == "42"


def test_normalization_applies_identically_to_both_groups():
    click_ids = normalize_click_ids(ClickIds(gclid=" null ", fbclid=" fb1 ", msclkid=""))
    utm = normalize_utms(UtmParams(utm_source=" null ", utm_medium=" email ", utm_term=""))
    assert click_ids.to_dict() == {"fbclid": "fb1"}
    assert utm.to_dict() == {"utm_medium": "email"}


def test_normalization_is_idempotent():
    utm = UtmParams(utm_source="  Google ", utm_medium="(not set)", utm_campaign=" spring ")
    once = normalize_utms(utm)
    assert normalize_utms(once) == once
    click_ids = ClickIds(gclid=" g ", wbraid="undefined")
    assert normalize_click_ids(normalize_click_ids(click_ids)) == normalize_click_ids(click_ids)


def test_consent_granted_keeps_click_ids():
    click_ids = ClickIds(gclid="g", fbclid="f")
    assert apply_consent_to_click_ids(click_ids, ConsentPolicy()) is click_ids


def test_consent_denied_drops_all_click_ids(caplog):
    caplog.set_level(logging.DEBUG, logger="attribution")
    click_ids = ClickIds(gclid="g", ttclid="t")
    gated = apply_consent_to_click_ids(click_ids, ConsentPolicy(ad_storage_granted=False))
    assert gated.to_dict() == {}
    assert "click_ids_dropped_for_consent" in caplog.text


def test_consent_denied_without_click_ids_is_a_no_op():
    empty = ClickIds()
    assert apply_consent_to_click_ids(empty, ConsentPolicy(ad_storage_granted=False)) is empty


def test_analytics_consent_does_not_gate_click_ids():
    click_ids = ClickIds(gclid="g")
    policy = ConsentPolicy(ad_storage_granted=True, analytics_storage_granted=False)
    assert apply_consent_to_click_ids(click_ids, policy).to_dict() == {"gclid": "g"}
