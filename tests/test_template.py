import re
import tempfile
import unittest
from pathlib import Path

from catala_wasm.errors import MissingAssetError, TemplateError
from catala_wasm.template import (
    Outcome,
    Substitution,
    apply_substitutions,
    base_url_expression,
    playground_substitutions,
    render_language_options,
    rewrite_template,
)

from fakes import PLAYGROUND_HTML, make_tree_sitter_repo

LABELS = {"catala_en": "Catala (en)", "catala_fr": "Catala (fr)"}


def _steps(**overrides):
    options = dict(
        product_name="Catala",
        base_url_mode="static",
        mount_prefix="/catala-wasm",
        compiler_link=True,
    )
    options.update(overrides)
    return playground_substitutions(["catala_en", "catala_fr"], LABELS, **options)


class TestLanguageOptions(unittest.TestCase):

    def test_labels_with_fallback_in_list_order(self):
        select = render_language_options(["lo", "hi"], {"lo": "Lang LO"})
        self.assertIn('<option value="lo">Lang LO</option>', select)
        self.assertIn('<option value="hi">hi</option>', select)
        self.assertLess(select.index('value="lo"'), select.index('value="hi"'))
        self.assertTrue(select.startswith('<select id="language-select">'))
        self.assertTrue(select.endswith("</select>"))

    def test_labels_are_escaped(self):
        select = render_language_options(["x"], {"x": "<b>&"})
        self.assertIn("&lt;b&gt;&amp;", select)


class TestBaseUrlExpression(unittest.TestCase):

    def test_static(self):
        self.assertEqual(base_url_expression("static", "/catala-wasm"), '""')

    def test_path_aware(self):
        expr = base_url_expression("path-aware", "/catala-wasm")
        self.assertEqual(
            expr,
            '(function(){ var p = window.location.pathname; '
            'if (/\\/catala-wasm(\\/|$)/.test(p)) return "/catala-wasm"; return ""; })()',
        )

    def test_path_aware_normalises_and_escapes_prefix(self):
        expr = base_url_expression("path-aware", "docs.v2/")
        self.assertIn("/\\/docs\\.v2(\\/|$)/", expr)
        self.assertIn('return "/docs.v2";', expr)

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            base_url_expression("dynamic", "/x")


class TestSubstitution(unittest.TestCase):

    def test_optional_miss_leaves_text(self):
        step = Substitution("nothing", re.compile("absent"), lambda m: "x")
        self.assertEqual(step("some text"), ("some text", Outcome.SKIPPED))

    def test_required_miss_raises(self):
        step = Substitution("needed", re.compile("absent"), lambda m: "x", required=True)
        with self.assertRaises(TemplateError):
            step("some text")

    def test_replacement_is_literal(self):
        step = Substitution("slashes", re.compile("X"), lambda m: r"\1 \/ $")
        self.assertEqual(step("aXb")[0], r"a\1 \/ $b")


class TestPlaygroundSubstitutions(unittest.TestCase):

    def test_all_steps_apply_to_upstream_page(self):
        text, outcomes = apply_substitutions(PLAYGROUND_HTML, _steps())

        self.assertEqual([o for _, o in outcomes], [Outcome.APPLIED] * 4)
        self.assertNotIn("THE_LANGUAGE_NAME", text)
        self.assertIn("<title>tree-sitter Catala playground</title>", text)
        self.assertIn('LANGUAGE_BASE_URL = "";', text)
        self.assertIn('<option value="catala_fr">Catala (fr)</option>', text)
        self.assertNotIn('value="parser"', text)
        self.assertIn(
            '<span class="language-name">Language: Catala</span> <a href="./compiler.html">Compiler</a>',
            text,
        )

    def test_branding_is_idempotent(self):
        once, _ = apply_substitutions(PLAYGROUND_HTML, _steps()[:1])
        twice, outcomes = apply_substitutions(once, _steps()[:1])
        self.assertEqual(once, twice)
        self.assertEqual(outcomes, [("product-name", Outcome.SKIPPED)])
        self.assertEqual(once.count("Catala"), PLAYGROUND_HTML.count("THE_LANGUAGE_NAME"))

    def test_missing_select_degrades_gracefully(self):
        source = re.sub(r'<select id="language-select"[\s\S]*?</select>', "", PLAYGROUND_HTML)

        text, outcomes = apply_substitutions(source, _steps())

        self.assertIn(("language-select", Outcome.SKIPPED), outcomes)
        expected = (
            source.replace("THE_LANGUAGE_NAME", "Catala")
            .replace('LANGUAGE_BASE_URL = "https://example.invalid";', 'LANGUAGE_BASE_URL = "";')
            .replace(
                '<span class="language-name">Language: Catala</span>',
                '<span class="language-name">Language: Catala</span> <a href="./compiler.html">Compiler</a>',
            )
        )
        self.assertEqual(text, expected)

    def test_compiler_link_disabled(self):
        text, outcomes = apply_substitutions(PLAYGROUND_HTML, _steps(compiler_link=False))
        self.assertEqual(len(outcomes), 3)
        self.assertNotIn("compiler.html", text)

    def test_path_aware_base_url(self):
        text, _ = apply_substitutions(PLAYGROUND_HTML, _steps(base_url_mode="path-aware"))
        self.assertIn('LANGUAGE_BASE_URL = (function(){ var p = window.location.pathname; ', text)
        self.assertIn("/\\/catala-wasm(\\/|$)/", text)


class TestRewriteTemplate(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.ts = make_tree_sitter_repo(root / "tree-sitter")
        self.html = self.ts / "crates" / "cli" / "src" / "playground.html"
        self.js = self.ts / "docs" / "src" / "assets" / "js" / "playground.js"
        self.dist = root / "dist"

    def tearDown(self):
        self._tmp.cleanup()

    def test_writes_index_and_script(self):
        index = rewrite_template(
            self.html, self.js, ["catala_en"], LABELS, self.dist,
            product_name="Catala", base_url_mode="static", compiler_link=True,
        )
        self.assertEqual(index, self.dist / "index.html")
        self.assertIn('<option value="catala_en">Catala (en)</option>', index.read_text(encoding="utf-8"))
        self.assertEqual((self.dist / "playground.js").read_text(encoding="utf-8"), "// playground\n")

    def test_missing_script_writes_nothing(self):
        self.js.unlink()
        self.dist.mkdir()
        (self.dist / "keep.wasm").write_bytes(b"x")
        before = sorted(p.name for p in self.dist.iterdir())

        with self.assertRaises(MissingAssetError) as ctx:
            rewrite_template(self.html, self.js, ["catala_en"], LABELS, self.dist)

        self.assertEqual(ctx.exception.path, self.js)
        self.assertEqual(sorted(p.name for p in self.dist.iterdir()), before)

    def test_missing_template_writes_nothing(self):
        self.html.unlink()
        with self.assertRaises(MissingAssetError):
            rewrite_template(self.html, self.js, ["catala_en"], LABELS, self.dist)
        self.assertFalse(self.dist.exists())


if __name__ == "__main__":
    unittest.main()
