"""
Opt-in strict checks.

The tree builder trusts the tokenizer: any END closes whatever is open and
table rows may have any number of cells. These checks sit on top of it for
`--strict` builds and the `check` command.
"""

from mdcontext import document as doc
from mdcontext.errors import BuildError
from mdcontext.tokens import EventKind


def checked_events(events):
    """
    Pass events through, failing on broken nesting.

    Raises BuildError on an END whose tag is not the innermost open tag, on
    an END with nothing open, and on a stream that ends with open constructs.
    """
    open_tags = []
    for event in events:
        if event.kind is EventKind.START:
            open_tags.append(event.tag)
        elif event.kind is EventKind.END:
            if not open_tags:
                raise BuildError("end of a construct that was never opened", construct=event)
            expected = open_tags.pop()
            if event.tag is not expected:
                raise BuildError(
                    f"end of {event.tag.name} while {expected.name} is open",
                    construct=event,
                )
        yield event

    if open_tags:
        names = ", ".join(tag.name for tag in open_tags)
        raise BuildError(f"stream ended with open constructs: {names}")


def table_width_problems(fragment):
    """One message per table row whose cell count differs from its column count."""
    problems = []
    for table in _tables(fragment):
        columns = len(table.alignments)
        rows = [("header", row) for row in table.header_rows]
        rows += [("body", row) for row in table.body_rows]
        for number, (group, row) in enumerate(rows, 1):
            if len(row) != columns:
                problems.append(
                    f"table row {number} ({group}) has {len(row)} cells, expected {columns}"
                )
    return problems


def check_table_widths(fragment):
    problems = table_width_problems(fragment)
    if problems:
        raise BuildError(problems[0])


def _tables(fragment):
    """Every table in a fragment, depth first, including tables inside cells."""
    for element in fragment:
        if isinstance(element, doc.Table):
            yield element
            for row in element.header_rows + element.body_rows:
                for cell in row:
                    yield from _tables(cell)
        else:
            for child in _children(element):
                yield from _tables(child)


def _children(element):
    if isinstance(element, doc.List):
        return element.items
    if isinstance(element, doc.Link):
        return [element.label]
    if isinstance(element, doc.Image):
        return [element.alt]
    content = getattr(element, "content", None)
    return [content] if content is not None else []
