from __future__ import annotations

import unittest

from ampfilter import AmpFilter, AmpSettings, FilterState, PageStylesheet, RequestContext, StaticServices
from ampfilter.filter import amp_url, append_amp_html_link, transform_to_amp_html
from ampfilter.rules import AMP_BOILERPLATE, AMP_CHARSET, AMP_VIEWPORT, DEFAULT_RULES

REQUEST = RequestContext(is_secure=False, relative_path="/a", url="http://www.example.com/a")
SETTINGS = AmpSettings(
    domain_name="www.example.com",
    domain_alias="https://m.example.com",
    video_script_url="https://x/v.js",
    form_script_url="https://x/f.js",
    font_providers=["https://fonts.googleapis.com"],
)

PAGE = (
    "<!DOCTYPE html>"
    '<html lang="en">'
    "<head>"
    "<title>News</title>"
    '<link rel="stylesheet" href="/site.css">'
    '<link rel="stylesheet" href="https://fonts.googleapis.com/css?family=Roboto">'
    "<style>p{color:red}</style>"
    '<script src="/jquery.js"></script>'
    "<!--[if lt IE 9]><script src=\"/shiv.js\"></script><![endif]-->"
    "</head>"
    '<body onload="init()">'
    '<div class="-amp-hidden content" style="margin:0" id="main">'
    '<img src="/a.png" alt="A" onerror="x()">'
    '<video src="a.mp4"></video><video src="b.mp4"></video>'
    '<form method="post" action="/subscribe"><input name="email"><input type="password" name="p"></form>'
    "<script>track()</script>"
    "</div>"
    "</body>"
    "</html>"
)


class TestTransformToAmpHtml(unittest.TestCase):
    def _convert(self, html: str, settings: AmpSettings = SETTINGS, **kwargs: object) -> str:
        return transform_to_amp_html(html, settings, StaticServices(), REQUEST, **kwargs)  # type: ignore[arg-type]

    def test_page_without_rewritable_content_only_gains_mandatory_markup(self) -> None:
        html = "<!DOCTYPE html><html><head><title>T</title></head><body><p>Hello</p></body></html>"
        assert self._convert(html, AmpSettings(domain_name="www.example.com")) == (
            "<!doctype html><html amp><head>\n"
            + AMP_CHARSET
            + "\n"
            + '<script async src="https://cdn.ampproject.org/v0.js"></script>\n'
            + '<link rel="canonical" href="http://www.example.com/a">\n'
            + AMP_VIEWPORT
            + "\n"
            + AMP_BOILERPLATE
            + "\n"
            + "<style amp-custom></style>\n"
            + "<title>T</title></head><body><p>Hello</p></body></html>"
        )

    def test_video_scenario(self) -> None:
        out = self._convert('<video src="a.mp4"></video>')
        assert '<amp-video src="a.mp4"></amp-video>' in out
        assert "<video" not in out
        assert out.count("https://x/v.js") == 1
        assert '<script async custom-element="amp-video" src="https://x/v.js"></script>\n' in out

    def test_full_page(self) -> None:
        out = self._convert(PAGE)

        assert out.startswith('<!doctype html><html amp lang="en"><head>\n' + AMP_CHARSET + "\n")

        # Scripts: only the runtime and the two custom elements remain.
        assert out.count("<script") == 3
        assert "jquery" not in out
        assert "track()" not in out
        assert "shiv" not in out

        # Stylesheets: only the allowed font provider link and AMP styles remain.
        assert "/site.css" not in out
        assert '<link rel="stylesheet" href="https://fonts.googleapis.com/css?family=Roboto">' in out
        assert "p{color:red}" not in out
        assert "style=" not in out

        # Attributes.
        assert "onload" not in out
        assert "onerror" not in out
        assert '<div class="content" id="main">' in out
        assert "<body>" in out

        # Tags.
        assert '<amp-img src="/a.png" alt="A"></amp-img>' in out
        assert '<amp-video src="a.mp4"></amp-video><amp-video src="b.mp4"></amp-video>' in out
        assert '<form method="post" action-xhr="/subscribe" target="_blank"><input name="email"></form>' in out

        # Head order: form script comes before video script, both before the canonical link.
        form_at = out.index('custom-element="amp-form" src="https://x/f.js"')
        video_at = out.index('custom-element="amp-video" src="https://x/v.js"')
        canonical_at = out.index('<link rel="canonical" href="http://www.example.com/a">')
        assert form_at < video_at < canonical_at
        assert out.count("amp-video-0.1.js") == 0
        assert out.count("https://x/v.js") == 1

    def test_restricted_element_is_removed_regardless_of_depth(self) -> None:
        html = "<div>" * 20 + "<script>evil()</script>" + "</div>" * 20
        out = self._convert(html)
        assert "evil()" not in out
        assert out.count("<script") == 1

    def test_restricted_element_inside_noscript_is_removed(self) -> None:
        out = self._convert("<body><noscript><script>evil()</script><img src=x></noscript></body>")
        assert "evil()" not in out
        assert '<noscript><amp-img src="x"></amp-img></noscript>' in out

    def test_restricted_element_inside_template_is_removed(self) -> None:
        out = self._convert("<body><template><script>evil()</script><img src=a></template></body>")
        assert "evil()" not in out
        assert '<template><amp-img src="a"></amp-img></template>' in out

    def test_event_handler_next_to_quote_in_attribute_name_is_removed(self) -> None:
        out = self._convert("<div onclick=\"evil()\" data-x'=1>x</div>")
        assert "evil()" not in out
        assert "<div data-x'=\"1\">x</div>" in out

    def test_head_tag_inside_leading_comment_is_ignored(self) -> None:
        out = self._convert("<!-- <head> --><html><head><title>T</title></head><body></body></html>")
        assert out.startswith("<!-- <head> --><html amp><head>\n" + AMP_CHARSET + "\n")
        assert out.count(AMP_CHARSET) == 1

    def test_custom_css_is_inlined(self) -> None:
        services = StaticServices(stylesheets={"3": "h1{font-size:2em}"})
        out = transform_to_amp_html(
            "<h1>x</h1>",
            SETTINGS,
            services,
            REQUEST,
            page=PageStylesheet(use_default_stylesheet=False, stylesheet_id=3),
        )
        assert "<style amp-custom>h1{font-size:2em}</style>" in out

    def test_custom_rule_table(self) -> None:
        rules = DEFAULT_RULES.extend(restricted_elements=["marquee"])
        out = self._convert("<marquee>hi</marquee><p>x</p>", rules=rules)
        assert "marquee" not in out

    def test_requirement_set_does_not_leak_between_runs(self) -> None:
        first = self._convert("<video></video>")
        second = self._convert("<p>x</p>")
        assert "amp-video" in first
        assert "amp-video" not in second


class TestAppendAmpHtmlLink(unittest.TestCase):
    def test_link_only_scenario(self) -> None:
        html = "<html><head><title>T</title></head><body><p>x</p></body></html>"
        settings = AmpSettings(domain_alias="https://m.example.com", friendly_url_extension="")
        out = append_amp_html_link(html, settings, REQUEST)
        assert out == (
            '<html><head><title>T</title><link rel="amphtml" href="https://m.example.com/a">\n'
            "</head><body><p>x</p></body></html>"
        )

    def test_alias_without_scheme_uses_connection_protocol(self) -> None:
        secure = RequestContext(is_secure=True, relative_path="/news")
        settings = AmpSettings(domain_alias="amp.example.com", friendly_url_extension=".aspx")
        assert amp_url(settings, secure) == "https://amp.example.com/news.aspx"

    def test_each_call_inserts_one_link(self) -> None:
        html = "<html><head></head><body></body></html>"
        once = append_amp_html_link(html, SETTINGS, REQUEST)
        twice = append_amp_html_link(once, SETTINGS, REQUEST)
        assert once.count('rel="amphtml"') == 1
        assert twice.count('rel="amphtml"') == 2

    def test_closing_head_inside_comment_is_ignored(self) -> None:
        html = "<html><head><!-- </head> --><title>T</title></head><body></body></html>"
        out = append_amp_html_link(html, SETTINGS, REQUEST)
        assert out == (
            "<html><head><!-- </head> --><title>T</title>"
            '<link rel="amphtml" href="https://m.example.com/a">\n'
            "</head><body></body></html>"
        )

    def test_document_without_head_is_unchanged(self) -> None:
        assert append_amp_html_link("<p>x</p>", SETTINGS, REQUEST) == "<p>x</p>"


class TestAmpFilter(unittest.TestCase):
    HTML = '<html><head><title>T</title></head><body><p style="x">y</p><script>z()</script></body></html>'

    def test_disabled_returns_html_unchanged(self) -> None:
        amp_filter = AmpFilter(SETTINGS)
        assert amp_filter.process(self.HTML, FilterState.DISABLED, REQUEST) == self.HTML

    def test_unknown_state_is_treated_as_disabled(self) -> None:
        amp_filter = AmpFilter(SETTINGS)
        for state in ("maybe", 9, None):
            assert amp_filter.process(self.HTML, state, REQUEST) == self.HTML

    def test_active_state_transforms(self) -> None:
        out = AmpFilter(SETTINGS)(self.HTML, "active", REQUEST)
        assert out.startswith("<html amp><head>")
        assert "z()" not in out

    def test_link_only_state_injects_link(self) -> None:
        out = AmpFilter(SETTINGS).process(self.HTML, FilterState.LINK_ONLY, REQUEST)
        assert out == self.HTML.replace("</head>", '<link rel="amphtml" href="https://m.example.com/a">\n</head>')

    def test_collected_notes(self) -> None:
        forwarded: list[str] = []
        amp_filter = AmpFilter(
            SETTINGS,
            collect_notes=True,
            report=lambda msg, *, node=None: forwarded.append(msg),
        )
        amp_filter.process(self.HTML, FilterState.ACTIVE, REQUEST)
        messages = [note.message for note in amp_filter.notes]
        assert "Removed restricted element <script>" in messages
        assert "Removed attribute 'style' from <p>" in messages
        assert forwarded == messages
        assert {note.tag for note in amp_filter.notes} == {"script", "p"}

        amp_filter.process(self.HTML, FilterState.DISABLED, REQUEST)
        assert amp_filter.notes == []

    def test_service_failure_propagates(self) -> None:
        def broken(css: str) -> str:
            raise RuntimeError("macro engine down")

        amp_filter = AmpFilter(SETTINGS, StaticServices(macro_resolver=broken))
        with self.assertRaises(RuntimeError):
            amp_filter.process(self.HTML, FilterState.ACTIVE, REQUEST)
        # Link-only mode does not touch the stylesheet services.
        assert 'rel="amphtml"' in amp_filter.process(self.HTML, FilterState.LINK_ONLY, REQUEST)
