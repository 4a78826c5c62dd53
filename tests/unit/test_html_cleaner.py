"""Unit tests for rendered-page noise stripping."""

from __future__ import annotations

from festival_scout.services.extraction.html_cleaner import (
    is_noise_attribute,
    strip_noise,
    visible_text_length,
)

_PAGE = """
<html>
  <head><title>Summer Sound</title><script>var tracking = 1;</script></head>
  <body>
    <nav><a href="/">Home</a></nav>
    <!-- lineup starts here -->
    <div class="lineup" id="days" data-index="3" style="color: red" onclick="go()" aria-label="x">
      <h2>Saturday 20 July</h2>
      <ul>
        <li class="act">  Arctic
             Monkeys </li>
        <li></li>
      </ul>
      <img src="poster.png" alt="poster">
      <form><input name="q"><button>Search</button></form>
    </div>
    <footer>Copyright</footer>
  </body>
</html>
"""


class TestStripNoise:
    def test_removes_noise_elements(self) -> None:
        result = strip_noise(_PAGE)
        for fragment in ("<script", "<nav", "<footer", "<img", "<form", "<head", "Copyright", "Home"):
            assert fragment not in result

    def test_removes_comments(self) -> None:
        assert "lineup starts here" not in strip_noise(_PAGE)

    def test_keeps_selector_attributes_drops_the_rest(self) -> None:
        result = strip_noise(_PAGE)
        assert 'class="lineup"' in result
        assert 'id="days"' in result
        assert 'class="act"' in result
        for attribute in ("style=", "onclick=", "data-index=", "aria-label="):
            assert attribute not in result

    def test_drops_empty_elements(self) -> None:
        result = strip_noise(_PAGE)
        assert "<li></li>" not in result
        assert strip_noise("<div><p><span> </span></p><p>Lineup</p></div>") == "<div><p>Lineup</p></div>"

    def test_collapses_whitespace(self) -> None:
        result = strip_noise(_PAGE)
        assert "Arctic Monkeys" in result
        assert "\n" not in result
        assert "> <" not in result

    def test_structural_roots_survive_when_empty(self) -> None:
        assert strip_noise("<html><body><div></div></body></html>") == "<html><body></body></html>"


class TestHelpers:
    def test_noise_attribute_names(self) -> None:
        assert is_noise_attribute("onClick")
        assert is_noise_attribute("data-track")
        assert is_noise_attribute("aria-hidden")
        assert is_noise_attribute("style")
        assert not is_noise_attribute("class")
        assert not is_noise_attribute("href")

    def test_visible_text_length(self) -> None:
        assert visible_text_length("<div> Arctic   <b>Monkeys</b> </div>") == len("Arctic Monkeys")
        assert visible_text_length("<html><body></body></html>") == 0
