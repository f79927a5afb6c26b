from __future__ import annotations

import unittest

from ampfilter.corrections import correct_attributes, perform_regex_corrections
from ampfilter.rules import AMP_BOILERPLATE, DEFAULT_RULES, AttributeRule


class TestAttributeCorrections(unittest.TestCase):
    def _fix(self, html: str) -> str:
        return correct_attributes(html, DEFAULT_RULES.attribute_rules)

    def test_event_handlers_are_removed(self) -> None:
        assert self._fix('<a href="/x" onclick="go()" onMouseOver="y">t</a>') == '<a href="/x">t</a>'

    def test_attribute_names_with_quotes_do_not_hide_the_tag(self) -> None:
        assert self._fix("<div onclick=\"evil()\" data-x'=\"1\">x</div>") == "<div data-x'=\"1\">x</div>"
        assert self._fix('<p =a="1" onclick="x">t</p>') == '<p =a="1">t</p>'

    def test_amp_on_attribute_is_kept(self) -> None:
        assert self._fix('<button on="tap:menu.toggle">m</button>') == '<button on="tap:menu.toggle">m</button>'

    def test_xml_namespace_attributes_are_removed(self) -> None:
        assert self._fix('<svg xmlns:xlink="http://www.w3.org/1999/xlink" xml:lang="en"></svg>') == "<svg></svg>"

    def test_reserved_i_amp_attributes_are_removed(self) -> None:
        assert self._fix('<div i-amphtml-layout="x" i-amp-foo data-x="1"></div>') == '<div data-x="1"></div>'

    def test_reserved_class_names_are_removed(self) -> None:
        assert self._fix('<p class="a -amp-b i-amphtml-c d">x</p>') == '<p class="a d">x</p>'

    def test_class_with_only_reserved_names_is_dropped(self) -> None:
        assert self._fix('<p class="-amp-b">x</p>') == "<p>x</p>"

    def test_classes_merely_containing_amp_are_kept(self) -> None:
        assert self._fix('<p class="x-amp-y camp">x</p>') == '<p class="x-amp-y camp">x</p>'

    def test_reserved_ids_are_removed(self) -> None:
        assert self._fix('<p id="-amp-x">a</p><p id="i-amp-1">b</p><p id="ok">c</p>') == (
            '<p>a</p><p>b</p><p id="ok">c</p>'
        )

    def test_attribute_like_text_inside_values_is_untouched(self) -> None:
        html = '<p title="call onload=now i-amp x" data-id="-amp-x">t</p>'
        assert self._fix(html) == html

    def test_text_content_is_untouched(self) -> None:
        html = "<p>onclick=&quot;x&quot; class -amp-</p>"
        assert self._fix(html) == html

    def test_boolean_attributes_survive(self) -> None:
        assert self._fix('<input disabled onfocus="x" name="q">') == '<input disabled name="q">'

    def test_report_is_called_for_dropped_attributes(self) -> None:
        seen: list[str] = []
        correct_attributes('<p onclick="x">t</p>', [AttributeRule("onclick")], lambda msg, **kw: seen.append(msg))
        assert seen == ["Removed attribute 'onclick' from <p>"]

    def test_no_rules_is_identity(self) -> None:
        assert correct_attributes('<p onclick="x">', []) == '<p onclick="x">'


class TestPerformRegexCorrections(unittest.TestCase):
    def test_full_correction_pass(self) -> None:
        html = (
            "<!DOCTYPE html><html><head>\n"
            "<!--[if lt IE 9]><script src=\"html5shiv.js\"></script><![endif]-->\n"
            "</head><body onload=\"init()\"><p class=\"-amp-x y\" id=\"i-amp-z\">t</p></body></html>"
        )
        assert perform_regex_corrections(html, DEFAULT_RULES) == (
            '<!doctype html><html amp><head>\n\n</head><body><p class="y">t</p></body></html>'
        )

    def test_boilerplate_is_not_altered(self) -> None:
        html = "<html><head>" + AMP_BOILERPLATE + "</head></html>"
        assert perform_regex_corrections(html, DEFAULT_RULES) == "<html amp><head>" + AMP_BOILERPLATE + "</head></html>"
