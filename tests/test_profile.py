import pytest

from link_checker.crawler.profile import CrawlProfile, ProfileKind, should_visit

BASE = "http://example.test/"


def test_all_urls_accepts_any_http_host():
    profile = CrawlProfile.all_urls()
    assert should_visit(profile, "http://example.test/about", BASE)
    assert should_visit(profile, "https://external.test/x", BASE)
    assert profile.allows_external


def test_internal_only_accepts_base_host_only():
    profile = CrawlProfile.internal_only(BASE)
    assert profile.kind is ProfileKind.INTERNAL_ONLY
    assert profile.host == "example.test"
    assert should_visit(profile, "http://example.test/about", BASE)
    assert should_visit(profile, "https://example.test:8443/secure", BASE)
    assert not should_visit(profile, "http://external.test/y", BASE)
    assert not should_visit(profile, "http://sub.example.test/", BASE)
    assert not profile.allows_external


def test_internal_only_without_filter_uses_base_url():
    profile = CrawlProfile(ProfileKind.INTERNAL_ONLY)
    assert should_visit(profile, "http://example.test/a", BASE)
    assert not should_visit(profile, "http://external.test/a", BASE)


@pytest.mark.parametrize("profile", [CrawlProfile.all_urls(), CrawlProfile.internal_only(BASE)])
def test_non_http_urls_rejected(profile):
    assert not should_visit(profile, "ftp://example.test/file", BASE)
    assert not should_visit(profile, "mailto:a@example.test", BASE)


def test_decision_is_deterministic():
    profile = CrawlProfile.internal_only(BASE)
    answers = {should_visit(profile, "http://external.test/y", BASE) for _ in range(10)}
    assert answers == {False}


def test_for_config():
    assert CrawlProfile.for_config(True, BASE) == CrawlProfile.all_urls()
    assert CrawlProfile.for_config(False, BASE) == CrawlProfile.internal_only(BASE)
