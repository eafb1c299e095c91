"""
ConTeXt rendering of document fragments.

render_fragment() walks a fragment and returns ConTeXt source. Plain text
goes through escape_text() and smart_quotes(); inline code goes through
the to_verbatim() transducer. Level-1 headings produce nothing here: the
book writer emits them from the navigation tree.
"""

import re
from enum import Enum

from mdcontext import document as doc
from mdcontext.errors import RenderError


# ── Text ───────────────────────────────────────────────────────────────

ESCAPED_CHARS = set("\\~{}#%$")

REPLACEMENT_CHAR = "\ufffd"
REPLACEMENT_ESCAPE = "\\char65533\\relax"

OPENING_QUOTE = "\u201c"
CLOSING_QUOTE = "\u201d"

# A straight quote at the start of a line or after whitespace opens
OPENING_QUOTE_RE = re.compile(r'(?:^|(?<=\s))"', re.MULTILINE)


def escape_text(text):
    """Escape characters that are special to ConTeXt."""
    ret = []
    for c in text:
        if c in ESCAPED_CHARS:
            ret.append(f"\\char`\\{c}")
        elif c == REPLACEMENT_CHAR:
            ret.append(REPLACEMENT_ESCAPE)
        else:
            ret.append(c)
    return "".join(ret)


def smart_quotes(text, prev="\n"):
    """
    Replace straight double quotes with opening/closing curly quotes.

    `prev` is the character before `text` in the source, so a quote right
    after an emphasis or a link still closes.
    """
    text = OPENING_QUOTE_RE.sub(OPENING_QUOTE, prev + text)[1:]
    return text.replace('"', CLOSING_QUOTE)


# ── Inline code ────────────────────────────────────────────────────────


class VerbatimState(Enum):
    CLOSED = "closed"
    BRACES = "braces"      # inside \type{...}
    PLUSSES = "plusses"    # inside \type+...+


VERBATIM_OPEN = {
    VerbatimState.BRACES: "\\type{",
    VerbatimState.PLUSSES: "\\type+",
}

VERBATIM_CLOSE = {
    VerbatimState.CLOSED: "",
    VerbatimState.BRACES: "}",
    VerbatimState.PLUSSES: "+",
}


def to_verbatim(text):
    """
    Typeset inline code with \\type.

    \\type{...} cannot hold unbalanced braces, so braces go into \\type+...+
    runs and everything else into \\type{...} runs, switching at every
    boundary: "a{b}c" becomes \\type{a}\\type+{+\\type{b}\\type+}+\\type{c}.
    """
    state = VerbatimState.CLOSED
    ret = []
    for c in text:
        wanted = VerbatimState.PLUSSES if c in "{}" else VerbatimState.BRACES
        other = VerbatimState.BRACES if wanted is VerbatimState.PLUSSES else VerbatimState.PLUSSES

        if state is other:
            ret.append(VERBATIM_CLOSE[state])
            state = VerbatimState.CLOSED
        if state is VerbatimState.CLOSED:
            ret.append(VERBATIM_OPEN[wanted])
            state = wanted

        ret.append(c)

    ret.append(VERBATIM_CLOSE[state])
    return "".join(ret)


def collect_text(fragment):
    """Concatenate a fragment that may only hold Text elements."""
    ret = []
    for element in fragment:
        if not isinstance(element, doc.Text):
            raise RenderError("content of a code block must be text-only", construct=element)
        ret.append(element.text)
    return "".join(ret)


# ── Elements ───────────────────────────────────────────────────────────

TABLE_ALIGN_KEYWORDS = {
    doc.ALIGN_LEFT: "flushleft",
    doc.ALIGN_RIGHT: "flushright",
    doc.ALIGN_CENTER: "middle",
}

FORMAT_SWITCHES = {
    doc.Format.EMPHASIS: "\\it ",
    doc.Format.STRONG: "\\bf ",
}


def render_fragment(fragment, prev="\n"):
    """Render a fragment as ConTeXt. Raises RenderError."""
    return _render_run(fragment, prev)[0]


def _render_run(fragment, prev):
    """Render a fragment; also returns its last source character."""
    ret = []
    for element in fragment:
        tex, prev = _render_inline(element, prev)
        ret.append(tex)
    return "".join(ret), prev


def _render_inline(element, prev):
    # Inline elements continue the quoting context, block elements restart it
    if isinstance(element, doc.Text):
        return smart_quotes(escape_text(element.text), prev), element.text[-1:] or prev

    if isinstance(element, doc.Code):
        return to_verbatim(element.text), element.text[-1:] or prev

    if isinstance(element, doc.Link):
        label, last = _render_run(element.label, prev)
        return f"\\goto{{{label}}}[url({element.dest})]", last

    if isinstance(element, doc.Formatting):
        return _render_formatting(element, prev)

    tex = _render_element(element)
    if isinstance(element, (doc.Image, doc.FootnoteRef)):
        return tex, tex[-1]
    return tex, "\n"


def _render_element(element):
    if isinstance(element, doc.CodeBlock):
        return f"\n\\starttyping\n{collect_text(element.content)}\n\\stoptyping\n"

    if isinstance(element, doc.Heading):
        if element.level == 1:
            return ""
        prefix = "sub" * (element.level - 1)
        return f"\\{prefix}section{{{render_fragment(element.content)}}}\n"

    if isinstance(element, doc.Paragraph):
        return render_fragment(element.content) + "\n\n"

    if isinstance(element, doc.List):
        items = "".join(f"\\item {render_fragment(item)}\n" for item in element.items)
        return f"\n\\startitemize\n{items}\n\\stopitemize\n"

    if isinstance(element, doc.Image):
        return f"\\externalfigure[{element.dest}]"

    if isinstance(element, doc.BlockQuote):
        return f"\n\\startblockquote\n{render_fragment(element.content)}\n\\stopblockquote\n"

    if isinstance(element, doc.Table):
        return _render_table(element)

    if isinstance(element, doc.HtmlFragment):
        lines = "".join(f"% {line}\n" for line in element.raw.splitlines())
        return f"\n{lines}"

    if isinstance(element, doc.FootnoteRef):
        return f"\\note[{element.name}]"

    if isinstance(element, doc.FootnoteDefinition):
        content = render_fragment(element.content).strip()
        return f"\\footnotetext[{element.name}]{{{content}}}\n"

    raise RenderError("unknown element", construct=element)


def _render_formatting(element, prev):
    content, last = _render_run(element.content, prev)
    if element.kind is doc.Format.STRIKETHROUGH:
        return f"\\overstrike{{{content}}}", last
    if element.kind in FORMAT_SWITCHES:
        return f"{{{FORMAT_SWITCHES[element.kind]}{content}}}", last
    raise RenderError("unexpected formatting type", construct=element.kind)


def _render_table(table):
    ret = []
    for column, alignment in enumerate(table.alignments, 1):
        keyword = TABLE_ALIGN_KEYWORDS.get(alignment)
        if keyword:
            ret.append(f"\\setupTABLE[c][{column}][align={keyword}]\n")

    ret.append("\\bTABLE\n")
    for cell_tag, rows in (("TH", table.header_rows), ("TD", table.body_rows)):
        for row in rows:
            ret.append("\\bTR\n")
            for cell in row:
                ret.append(f"\\b{cell_tag} {render_fragment(cell)} \\e{cell_tag}\n")
            ret.append("\\eTR\n")
    ret.append("\\eTABLE\n\n")
    return "".join(ret)
