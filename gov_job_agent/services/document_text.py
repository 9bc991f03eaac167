"""Dependency-free text scan of PDF notices: inflate content streams, read text-show operators."""

import re
import zlib
from typing import List, Tuple

from gov_job_agent.config import DOCUMENT_TEXT_MAX_CHARS
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

STREAM_RE = re.compile(rb"<<(.{0,600}?)>>\s*stream\r?\n(.*?)\r?\n?endstream", re.DOTALL)
NAME_RE = re.compile(rb"[^\s/\[\]()<>{}%]*")
OPERATOR_RE = re.compile(rb"[A-Za-z'\"][A-Za-z*'\"]*")
COMMENT_END_RE = re.compile(rb"\r\n|\r|\n")
# (string) Tj, (string) ', [(a) -20 (b)] TJ
SHOW_OPS = {b"Tj", b"TJ", b"'", b"\""}
NEXT_LINE_SHOW_OPS = {b"'", b"\""}
LINE_BREAK_OPS = {b"T*", b"Td", b"TD", b"ET"}

_ESCAPES = {b"n": "\n", b"r": "\n", b"t": " ", b"b": "", b"f": "", b"(": "(", b")": ")", b"\\": "\\"}


def _decode_pdf_string(raw: bytes) -> str:
    out: List[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i:i + 1]
        if ch == b"\\" and i + 1 < len(raw):
            nxt = raw[i + 1:i + 2]
            octal = re.match(rb"[0-7]{1,3}", raw[i + 1:i + 4])
            if octal:
                out.append(chr(int(octal.group(0), 8)))
                i += 1 + len(octal.group(0))
                continue
            out.append(_ESCAPES.get(nxt, nxt.decode("latin-1")))
            i += 2
            continue
        out.append(ch.decode("latin-1"))
        i += 1
    return "".join(out)


def _stream_payloads(data: bytes) -> List[bytes]:
    """Raw and FlateDecode-inflated content streams; undecodable streams are skipped."""
    payloads: List[bytes] = []
    for m in STREAM_RE.finditer(data):
        header, body = m.group(1), m.group(2)
        if b"FlateDecode" in header:
            try:
                payloads.append(zlib.decompress(body))
            except zlib.error:
                try:
                    payloads.append(zlib.decompressobj().decompress(body))
                except zlib.error:
                    continue
        elif b"Filter" not in header:
            payloads.append(body)
    return payloads


def _read_literal(payload: bytes, start: int) -> Tuple[bytes, int]:
    """
    Body of the literal string opening at payload[start] and the index just past it.
    Balanced unescaped parentheses nest inside a string; a backslash escapes the next byte.
    """
    depth = 0
    i = start
    while i < len(payload):
        c = payload[i:i + 1]
        if c == b"\\":
            i += 2
            continue
        if c == b"(":
            depth += 1
        elif c == b")":
            depth -= 1
            if depth == 0:
                return payload[start + 1:i], i + 1
        i += 1
    # Unterminated string: keep what is there
    return payload[start + 1:], len(payload)


def _scan_text_ops(payload: bytes) -> str:
    """Walk the content stream, pairing string operands with the show operator that follows them."""
    out: List[str] = []
    operands: List[str] = []
    i = 0
    while i < len(payload):
        c = payload[i:i + 1]
        if c == b"(":
            raw, i = _read_literal(payload, i)
            operands.append(_decode_pdf_string(raw))
            continue
        if c == b"%":
            eol = COMMENT_END_RE.search(payload, i)
            i = eol.end() if eol else len(payload)
            continue
        if c == b"<":
            # Dictionaries and hex strings carry no readable text here
            if payload[i + 1:i + 2] == b"<":
                i += 2
            else:
                close = payload.find(b">", i)
                i = close + 1 if close >= 0 else len(payload)
            continue
        if c == b"/":
            name = NAME_RE.match(payload, i + 1)
            i = name.end()
            continue
        op = OPERATOR_RE.match(payload, i)
        if op is None:
            i += 1
            continue
        token = op.group(0)
        if token in SHOW_OPS:
            if token in NEXT_LINE_SHOW_OPS:
                out.append("\n")
            out.append("".join(operands) + " ")
        elif token in LINE_BREAK_OPS:
            out.append("\n")
        operands = []
        i = op.end()
    return "".join(out)


def extract_document_text(data: bytes, max_chars: int = DOCUMENT_TEXT_MAX_CHARS) -> str:
    """
    Concatenate the string operands of text-show operators found in the document.
    Returns "" when nothing readable is found (e.g. scanned image PDFs).
    """
    if not data:
        return ""
    payloads = _stream_payloads(data) or [data]
    parts = [_scan_text_ops(p) for p in payloads]
    text = "\n".join(p for p in parts if p.strip())
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n+", "\n", text).strip()
    if not text:
        logger.info("No text operators found in document (%s bytes)", len(data))
    if max_chars and len(text) > max_chars:
        text = text[:max_chars]
    return text
