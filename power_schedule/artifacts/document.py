"""Load and save XML configuration artifacts without disturbing them.

The document is parsed only to find the elements that need new text. Each
element's byte span in the source is recorded while parsing, and saving
splices the new text into the original markup. Everything else (the
prolog, comments, self-closing tags, character references, attribute
quoting, line endings) is written back exactly as it was read, in the
encoding (and with the BOM) it was read with.
"""

import codecs
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional
from xml.parsers import expat
from xml.sax.saxutils import escape

from power_schedule.errors import ArtifactIOError, ArtifactStructureError

logger = logging.getLogger(__name__)

_PROLOG_ITEM = re.compile(
    r"\s*(?:<\?.*?\?>|<!--.*?-->|<!DOCTYPE[^>\[]*(?:\[.*?\])?\s*>)",
    re.DOTALL,
)


@dataclass
class Span:
    """Where an element sits in the UTF-8 encoded body."""

    tag_start: int
    tag_end: int
    content_end: Optional[int] = None

    @property
    def empty(self) -> bool:
        return self.content_end is None


@dataclass
class XmlDocument:
    """A parsed artifact plus the raw text it was parsed from."""

    path: Path
    encoding: str
    prolog: str
    body: str
    trailer: str
    root: ET.Element
    spans: Dict[ET.Element, Span] = field(default_factory=dict, repr=False)
    edits: Dict[ET.Element, str] = field(default_factory=dict, repr=False)

    def set_text(self, element: ET.Element, text: str) -> None:
        """Replace the text content of a leaf ``element``."""
        if len(element):
            raise ArtifactStructureError(
                self.path,
                local_name(element.tag),
                f"'{local_name(element.tag)}' in {self.path} has child elements",
            )
        element.text = text
        self.edits[element] = text

    def to_text(self) -> str:
        data = self.body.encode("utf-8")
        # Splice from the end so earlier offsets stay valid
        for element, text in sorted(
            self.edits.items(), key=lambda item: self.spans[item[0]].tag_start, reverse=True
        ):
            span = self.spans[element]
            content = escape(text).encode("utf-8")
            if span.empty:
                open_tag = data[span.tag_start:span.tag_end - 2].rstrip()
                name = element.tag.encode("utf-8")
                replacement = open_tag + b">" + content + b"</" + name + b">"
                data = data[:span.tag_start] + replacement + data[span.tag_end:]
            else:
                data = data[:span.tag_end] + content + data[span.content_end:]
        return self.prolog + data.decode("utf-8") + self.trailer


def detect_encoding(raw: bytes) -> str:
    """Pick the codec to decode ``raw`` with; BOM codecs re-emit the BOM on save."""
    if raw.startswith(codecs.BOM_UTF16_LE) or raw.startswith(codecs.BOM_UTF16_BE):
        return "utf-16"
    if raw.startswith(codecs.BOM_UTF8):
        return "utf-8-sig"
    return "utf-8"


def split_prolog(text: str):
    """Split ``text`` into (prolog, root element markup, trailer)."""
    pos = 0
    while True:
        match = _PROLOG_ITEM.match(text, pos)
        if not match:
            break
        pos = match.end()
    pos += len(text[pos:]) - len(text[pos:].lstrip())

    rest = text[pos:]
    body = rest.rstrip()
    return text[:pos], body, rest[len(body):]


def local_name(tag) -> str:
    """Tag without its namespace prefix; '' for anything that isn't a tag."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].rsplit(":", 1)[-1]


def iter_local(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Every descendant (or self) whose local tag name is ``name``."""
    for node in element.iter():
        if local_name(node.tag) == name:
            yield node


def child_elements(element: ET.Element):
    return list(element)


def _tag_end(data: bytes, pos: int) -> int:
    """Offset just past the ``>`` closing the tag that starts at ``pos``."""
    quote = None
    for index in range(pos, len(data)):
        char = data[index:index + 1]
        if quote:
            if char == quote:
                quote = None
        elif char in (b'"', b"'"):
            quote = char
        elif char == b">":
            return index + 1
    raise ValueError(f"unterminated tag at offset {pos}")


def parse_body(body: str):
    """Parse root element markup into (root, spans)."""
    data = body.encode("utf-8")
    builder = ET.TreeBuilder()
    spans: Dict[ET.Element, Span] = {}
    open_spans = []
    parser = expat.ParserCreate()

    def start(name, attrs):
        pos = parser.CurrentByteIndex
        element = builder.start(name, attrs)
        span = Span(tag_start=pos, tag_end=_tag_end(data, pos))
        spans[element] = span
        open_spans.append(span)

    def end(name):
        span = open_spans.pop()
        if data[span.tag_end - 2:span.tag_end] != b"/>":
            span.content_end = parser.CurrentByteIndex
        builder.end(name)

    parser.StartElementHandler = start
    parser.EndElementHandler = end
    parser.CharacterDataHandler = builder.data
    parser.Parse(data, True)
    return builder.close(), spans


def load_document(path: Path) -> XmlDocument:
    """Read and parse an XML artifact.

    Raises:
        ArtifactIOError: the file can't be read or decoded.
        ArtifactStructureError: the content isn't well-formed XML.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ArtifactIOError(
            path, f"Cannot read configuration artifact {path}: {e.strerror or e}"
        ) from e

    encoding = detect_encoding(raw)
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise ArtifactIOError(
            path, f"Cannot decode configuration artifact {path} as {encoding}"
        ) from e

    prolog, body, trailer = split_prolog(text)
    try:
        root, spans = parse_body(body)
    except (expat.ExpatError, ValueError) as e:
        raise ArtifactStructureError(
            path, "document", f"Configuration artifact {path} is not valid XML: {e}"
        ) from e

    logger.debug("Loaded %s (%s)", path, encoding)
    return XmlDocument(
        path=path,
        encoding=encoding,
        prolog=prolog,
        body=body,
        trailer=trailer,
        root=root,
        spans=spans,
    )


def save_document(
    document: XmlDocument, postprocess: Optional[Callable[[str], str]] = None
) -> None:
    """Write ``document`` back over the file it was loaded from."""
    text = document.to_text()
    if postprocess is not None:
        text = postprocess(text)

    try:
        document.path.write_bytes(text.encode(document.encoding))
    except OSError as e:
        raise ArtifactIOError(
            document.path,
            f"Cannot write configuration artifact {document.path}: {e.strerror or e}",
        ) from e
    logger.debug("Wrote %s (%s)", document.path, document.encoding)
