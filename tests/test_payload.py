import json

from attribution_resolver import resolve_attribution
from attribution_resolver.payload import build_result_payload
from attribution_resolver.versioning import CONTRACT_VERSION, get_contract_version


def test_payload_has_fixed_key_order():
    res = resolve_attribution({"page_location": "https://example.com/?fbclid=f&utm_medium=social&utm_source=fb"})
    payload = build_result_payload(res)
    assert list(payload) == ["version", "input", "signals", "attribution", "cleaned_url"]
    assert list(payload["signals"]) == ["click_ids", "utm"]
    assert list(payload["attribution"]) == [
        "channel",
        "source",
        "medium",
        "campaign",
        "content",
        "term",
        "click_id",
        "touch_type",
        "reason",
    ]
    # declaration order, not query order
    assert list(payload["signals"]["utm"]) == ["utm_source", "utm_medium"]


def test_payload_is_json_serializable():
    res = resolve_attribution({"page_location": "https://example.com/?msclkid=m&utm_source=bing&utm_medium=cpc"})
    decoded = json.loads(json.dumps(res.to_dict()))
    assert decoded["attribution"]["click_id"] == {"type": "msclkid", "value": "m"}
    assert decoded["signals"]["click_ids"] == {"msclkid": "m"}


def test_contract_version():
    assert get_contract_version() == CONTRACT_VERSION == "1.0.0"
