"""
compiler.html: an editor page driving the Catala web interpreter.

The page expects ``window.typecheck`` and ``window.interpret`` to be installed
by the interpreter script loaded at the end of the body. Until they exist the
buttons report that the interpreter is not loaded instead of throwing.
Both return ``{success, output?, diagnostics?: [{level, message}]}``.
"""

import html
import json
import logging
from pathlib import Path
from string import Template
from typing import Mapping, Optional, Sequence

from catala_wasm.config import settings

logger = logging.getLogger(__name__)

COMPILER_PAGE = "compiler.html"
INTERPRETER_SCRIPT = "catala_web_interpreter.bc.js"
CODEMIRROR_CDN = "https://cdnjs.cloudflare.com/ajax/libs/codemirror/6.65.7"

LANGUAGE_NAMES = {
    "en": "English",
    "fr": "Français",
    "pl": "Polski",
}

DEFAULT_CODE = "\n".join([
    "```catala",
    "declaration scope Test:",
    "  output result content integer",
    "",
    "scope Test:",
    "  definition result equals 42",
    "```",
])

PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>$title</title>
  <link rel="stylesheet" href="$codemirror/codemirror.min.css">
  <style>
    * { box-sizing: border-box; }
    body { margin: 0; font-family: system-ui, sans-serif; background: #1e1e1e; color: #d4d4d4; height: 100vh; display: flex; flex-direction: column; }
    header { padding: 12px 16px; border-bottom: 1px solid #333; display: flex; align-items: center; gap: 16px; flex-wrap: wrap; background: #252526; }
    header a { color: #79c0ff; text-decoration: none; }
    header a:hover { text-decoration: underline; }
    .row { display: flex; align-items: center; gap: 8px; }
    label { font-size: 14px; }
    select, input[type="text"] { padding: 6px 10px; border: 1px solid #555; border-radius: 4px; background: #3c3c3c; color: #d4d4d4; font-size: 14px; }
    button { padding: 8px 16px; border: 1px solid #555; border-radius: 4px; background: #0e639c; color: #fff; cursor: pointer; font-size: 14px; }
    button:hover { background: #1177bb; }
    main { flex: 1; display: flex; min-height: 0; }
    #editor-wrap { flex: 1; display: flex; flex-direction: column; border-right: 1px solid #333; min-width: 0; }
    #editor { flex: 1; min-height: 200px; }
    .CodeMirror { height: 100% !important; background: #1e1e1e !important; }
    #output-wrap { width: 50%; display: flex; flex-direction: column; min-width: 0; background: #252526; }
    .pane-header { padding: 8px 16px; border-bottom: 1px solid #333; font-weight: 600; }
    #output { flex: 1; overflow: auto; padding: 16px; margin: 0; font-family: ui-monospace, monospace; font-size: 13px; line-height: 1.5; white-space: pre-wrap; }
    #output.success { color: #7ee787; }
    #output.error { color: #f85149; }
    .diag { margin: 8px 16px; padding: 8px; border-radius: 4px; font-size: 13px; }
    .diag.error { background: rgba(248,81,73,0.15); color: #f85149; }
    .diag.warning { background: rgba(210,153,34,0.15); color: #d99a22; }
  </style>
</head>
<body>
  <header>
    <a href="./index.html">Parser playground</a>
    <span style="color:#555">|</span>
    <span>$heading</span>
    <div class="row">
      <label for="lang">Language</label>
      <select id="lang">$language_options</select>
    </div>
    <div class="row">
      <label for="scope">Scope</label>
      <input type="text" id="scope" placeholder="e.g. Test" value="Test" size="12">
    </div>
    <button id="btn-typecheck">Typecheck</button>
    <button id="btn-interpret">Interpret</button>
  </header>
  <main>
    <div id="editor-wrap">
      <div class="pane-header">Source</div>
      <div id="editor"></div>
    </div>
    <div id="output-wrap">
      <div class="pane-header">Output</div>
      <pre id="output">Enter $product code, then run Typecheck or Interpret.</pre>
      <div id="diagnostics"></div>
    </div>
  </main>
  <script src="$codemirror/codemirror.min.js"></script>
  <script>
    const defaultCode = $default_code;
    const editor = CodeMirror(document.getElementById('editor'), { value: defaultCode, lineNumbers: true, lineWrapping: true });
    const outputEl = document.getElementById('output');
    const diagEl = document.getElementById('diagnostics');
    const scopeInput = document.getElementById('scope');
    const langSelect = document.getElementById('lang');
    const runtime = window;

    function getFilename() {
      return 'main.catala_' + langSelect.value;
    }

    function showOutput(text, className) {
      outputEl.textContent = text;
      outputEl.className = className;
    }

    function run(interpret) {
      if (typeof runtime.typecheck !== 'function' || typeof runtime.interpret !== 'function') {
        diagEl.innerHTML = '';
        showOutput('Interpreter not loaded yet. Wait for the script to load.', 'error');
        return;
      }
      const code = editor.getValue();
      const lang = langSelect.value;
      const scope = scopeInput.value.trim();
      const files = {};
      files[getFilename()] = code;
      diagEl.innerHTML = '';
      showOutput('', '');

      try {
        const result = interpret
          ? runtime.interpret({ files: files, scope: scope, language: lang })
          : runtime.typecheck({ files: files, language: lang });
        showOutput(result.output || (result.success ? 'OK' : ''), result.success ? 'success' : 'error');
        (result.diagnostics || []).forEach(function(d) {
          const div = document.createElement('div');
          div.className = 'diag ' + (d.level === 'error' ? 'error' : 'warning');
          div.textContent = d.message;
          diagEl.appendChild(div);
        });
      } catch (e) {
        showOutput((e && e.message) || String(e), 'error');
      }
    }

    document.getElementById('btn-typecheck').onclick = function() { run(false); };
    document.getElementById('btn-interpret').onclick = function() { run(true); };
  </script>
  <script src="./$interpreter_script"></script>
</body>
</html>
""")


def render_language_options(languages: Sequence[str], names: Mapping[str, str] = LANGUAGE_NAMES) -> str:
    return "".join(
        f'<option value="{html.escape(lang)}">{html.escape(names.get(lang, lang))}</option>'
        for lang in languages
    )


def render_compiler_page(
    *,
    languages: Optional[Sequence[str]] = None,
    product_name: Optional[str] = None,
    default_code: str = DEFAULT_CODE,
    interpreter_script: str = INTERPRETER_SCRIPT,
) -> str:
    product = product_name or settings.PRODUCT_NAME
    # Keep "</script>" in the example from closing the inline script.
    code_literal = json.dumps(default_code).replace("</", "<\\/")
    return PAGE_TEMPLATE.substitute(
        title=html.escape(f"{product} Compiler"),
        heading=html.escape(f"{product} compiler"),
        product=html.escape(product),
        codemirror=CODEMIRROR_CDN,
        language_options=render_language_options(languages or settings.LANGUAGES),
        default_code=code_literal,
        interpreter_script=html.escape(interpreter_script),
    )


def generate_compiler_page(output_dir: Path, **kwargs) -> Path:
    """Write ``compiler.html`` into ``output_dir``; keyword arguments go to ``render_compiler_page``."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    page_path = output_dir / COMPILER_PAGE
    page_path.write_text(render_compiler_page(**kwargs), encoding="utf-8")
    logger.info("  Wrote %s -> %s/", COMPILER_PAGE, output_dir.name)
    return page_path
