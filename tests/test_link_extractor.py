from bs4.builder import ParserRejectedMarkup

from link_checker.crawler import link_extractor
from link_checker.crawler.link_extractor import extract_links, is_html
from link_checker.crawler.models import CrawlTarget

SOURCE = "http://example.test/"


def test_extracts_anchors_in_document_order():
    body = (
        '<html><body><a href="/about">About</a>'
        '<a href="http://external.test/x">X</a>'
        '<a href=" /missing ">Broken</a></body></html>'
    )
    targets = list(extract_links(body, "text/html; charset=utf-8", SOURCE))
    assert targets == [
        CrawlTarget("/about", SOURCE),
        CrawlTarget("http://external.test/x", SOURCE),
        CrawlTarget("/missing", SOURCE),
    ]


def test_non_html_yields_nothing():
    assert list(extract_links('<a href="/x">x</a>', "application/pdf", SOURCE)) == []
    assert list(extract_links('<a href="/x">x</a>', "", SOURCE)) == []
    assert list(extract_links("", "text/html", SOURCE)) == []


def test_is_lazy_and_restartable():
    body = '<a href="/a">a</a><a href="/b">b</a>'
    gen = extract_links(body, "text/html", SOURCE)
    assert next(gen) == CrawlTarget("/a", SOURCE)
    assert list(extract_links(body, "text/html", SOURCE)) == list(extract_links(body, "text/html", SOURCE))


def test_malformed_markup_degrades_gracefully():
    body = '<html><body><div><a href="/ok">ok<p><a href="/also-ok">unclosed <table><a href="/third"'
    urls = [t.url for t in extract_links(body, "text/html", SOURCE)]
    assert "/ok" in urls
    assert "/also-ok" in urls


def test_skips_empty_and_fragment_only_hrefs():
    body = '<a href="">e</a><a href="#top">t</a><a>no href</a><a href="/real">r</a>'
    assert [t.url for t in extract_links(body, "text/html", SOURCE)] == ["/real"]


def test_pagination_links_and_base_href():
    body = (
        '<head><base href="http://example.test/blog/">'
        '<link rel="stylesheet" href="style.css"><link rel="next" href="page/2"></head>'
        '<body><a href="post-1">p</a></body>'
    )
    urls = [t.url for t in extract_links(body, "application/xhtml+xml", SOURCE)]
    assert urls == ["http://example.test/blog/page/2", "http://example.test/blog/post-1"]


def test_is_html():
    assert is_html("text/html")
    assert is_html("TEXT/HTML; charset=UTF-8")
    assert not is_html("text/plain")
    assert not is_html(None)


def test_marked_section_junk_does_not_raise():
    for body in ('<a href="/x">x</a><![foo[bar]]>', '<a href="/x">x</a><![ '):
        urls = [t.url for t in extract_links(body, "text/html", SOURCE)]
        assert urls in ([], ["/x"])


def test_rejected_markup_yields_nothing(monkeypatch):
    def reject(*_args, **_kwargs):
        raise ParserRejectedMarkup("unknown status keyword 'foo' in marked section")

    monkeypatch.setattr(link_extractor, "BeautifulSoup", reject)
    assert list(extract_links('<a href="/x">x</a>', "text/html", SOURCE)) == []
