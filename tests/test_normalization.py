from tab_tracker.models import UNKNOWN_ADDRESS
from tab_tracker.normalization import normalize_address


def test_fragment_and_case_are_normalized():
    assert normalize_address("HTTPS://Example.COM/Docs?q=1#intro") == "https://example.com/Docs?q=1"


def test_default_port_and_empty_path():
    assert normalize_address("http://example.com:80") == "http://example.com/"
    assert normalize_address("https://example.com:8443/x") == "https://example.com:8443/x"


def test_browser_pages_pass_through():
    assert normalize_address("chrome://newtab/") == "chrome://newtab/"
    assert normalize_address("about:blank") == "about:blank"


def test_missing_url_is_unknown():
    assert normalize_address(None) == UNKNOWN_ADDRESS
    assert normalize_address("   ") == UNKNOWN_ADDRESS
