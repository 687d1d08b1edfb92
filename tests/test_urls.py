from attribution_resolver.urls import build_clean_url, normalize_referrer, read_params, safe_parse_url
from attribution_resolver.options import DEFAULT_REMOVE_PARAMS


def _clean(url, **kw):
    kw.setdefault("remove_params", DEFAULT_REMOVE_PARAMS)
    return build_clean_url(safe_parse_url(url), **kw)


def test_safe_parse_url_decomposes_absolute_urls():
    parsed = safe_parse_url("https://Shop.Example.com/a/b?x=1&x=2&y=%20z#frag")
    assert parsed is not None
    assert parsed.hostname == "shop.example.com"
    assert parsed.origin == "https://shop.example.com"
    assert parsed.pathname == "/a/b"
    assert parsed.hash == "#frag"
    assert parsed.query == (("x", "1"), ("x", "2"), ("y", " z"))


def test_safe_parse_url_returns_none_for_unusable_inputs():
    assert safe_parse_url(None) is None
    assert safe_parse_url("") is None
    assert safe_parse_url("   ") is None
    assert safe_parse_url("not a url") is None
    assert safe_parse_url("/relative/path?gclid=1") is None
    assert safe_parse_url("https://example.com:notaport/") is None
    assert safe_parse_url("https:///only-path") is None


def test_safe_parse_url_keeps_non_default_ports_in_origin():
    assert safe_parse_url("http://example.com:8080/x").origin == "http://example.com:8080"
    assert safe_parse_url("https://example.com:443/x").origin == "https://example.com"


def test_read_params_keeps_first_value_for_repeated_keys():
    params = read_params((("gclid", "first"), ("utm_source", "a"), ("gclid", "second")))
    assert params == {"gclid": "first", "utm_source": "a"}
    assert read_params(None) == {}


def test_build_clean_url_strips_tracking_params():
    assert _clean("https://x.com/?utm_source=a&gclid=b&keep=1") == "https://x.com/?keep=1"


def test_build_clean_url_drops_question_mark_when_query_empties():
    assert _clean("https://x.com/landing?utm_source=a&utm_medium=b#top") == "https://x.com/landing#top"


def test_build_clean_url_defaults_path_and_reencodes_query():
    assert _clean("https://x.com?q=a%20b&fbclid=zz") == "https://x.com/?q=a+b"


def test_build_clean_url_can_keep_click_ids():
    cleaned = _clean("https://x.com/?utm_source=a&gclid=b&keep=1", keep_click_ids_in_clean_url=True)
    assert cleaned == "https://x.com/?gclid=b&keep=1"


def test_build_clean_url_only_removes_configured_params():
    cleaned = _clean("https://x.com/?utm_source=a&ref=b&gclid=c", remove_params=["ref"])
    assert cleaned == "https://x.com/?utm_source=a&gclid=c"


def test_build_clean_url_leaves_parsed_url_untouched():
    parsed = safe_parse_url("https://x.com/?utm_source=a&keep=1")
    before = parsed.query
    build_clean_url(parsed, remove_params=["utm_source"])
    assert parsed.query == before


def test_build_clean_url_returns_none_without_url():
    assert build_clean_url(None, remove_params=DEFAULT_REMOVE_PARAMS) is None


def test_normalize_referrer_returns_host():
    assert normalize_referrer("https://www.google.com/search?q=x") == "www.google.com"


def test_normalize_referrer_suppresses_localhost_and_self_referrals():
    assert normalize_referrer("http://localhost:3000/") is None
    assert normalize_referrer("https://shop.example.com/cart", ["shop.example.com"]) is None
    assert normalize_referrer("https://shop.example.com/cart", ["SHOP.EXAMPLE.COM"]) is None
    assert normalize_referrer("https://other.example.com/", ["shop.example.com"]) == "other.example.com"


def test_normalize_referrer_handles_missing_or_invalid():
    assert normalize_referrer(None) is None
    assert normalize_referrer("") is None
    assert normalize_referrer("garbage") is None


def test_safe_parse_url_accepts_hostless_schemes():
    parsed = safe_parse_url("file:///p?utm_source=x#f")
    assert parsed.hostname == ""
    assert parsed.origin == "file://"
    assert parsed.pathname == "/p"
    assert parsed.query == (("utm_source", "x"),)
    mail = safe_parse_url("mailto:test@example.com?subject=hi")
    assert mail.hostname == ""
    assert mail.pathname == "test@example.com"


def test_build_clean_url_without_host_keeps_scheme_and_path():
    assert _clean("file:///p?utm_source=x&keep=1#f") == "file:///p?keep=1#f"
    assert _clean("mailto:test@example.com?gclid=g") == "mailto:test@example.com"


def test_build_clean_url_uses_form_encoding():
    assert _clean("https://x.com/?q=a~b*c%2Fd&utm_source=x") == "https://x.com/?q=a%7Eb*c%2Fd"


def test_normalize_referrer_ignores_hostless_referrers():
    assert normalize_referrer("file:///index.html") is None
