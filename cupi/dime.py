"""Download log files from a node through the DIME log collection service."""

from __future__ import annotations

import quopri
import struct
import sys
import warnings
from email.message import Message

import requests

from .rest import debug_enabled

SERVICE_URL = "https://{host}:8443/logcollectionservice/services/DimeGetFileService"
SOAP_ACTION = "http://schemas.cisco.com/ast/soap/action/#LogCollectionPort#GetOneFile"
RECORD_VERSION = 0x01
TIMEOUT = 120.0

_LOG_ROOT = "/var/log"
_ACTIVE_LOGS = "/var/log/active/"
_FAULT_OPEN = "<faultstring>"
_FAULT_CLOSE = "</faultstring>"

_ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/"
                   xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
                   xmlns:xsd="http://www.w3.org/2001/XMLSchema"
                   xmlns:SOAP-ENC="http://schemas.xmlsoap.org/soap/encoding/">
  <SOAP-ENV:Body SOAP-ENV:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
    <ns:GetOneFile xmlns:ns="http://schemas.cisco.com/ast/soap/">
      <FileName xsi:type="xsd:string">{path}</FileName>
    </ns:GetOneFile>
  </SOAP-ENV:Body>
</SOAP-ENV:Envelope>"""


class DimeError(Exception):
    """Raised when a log file cannot be fetched or its response cannot be decoded."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


def normalize_log_path(file_path: str) -> str:
    """Place paths outside /var/log under /var/log/active/."""
    if file_path.startswith(_LOG_ROOT):
        return file_path
    return _ACTIVE_LOGS + file_path.removeprefix("/")


def build_envelope(file_path: str) -> str:
    """Return the SOAP request asking for one file."""
    return _ENVELOPE.format(path=file_path)


def pad_to_4(n: int) -> int:
    """Round n up to the next multiple of four."""
    remainder = n % 4
    return n if remainder == 0 else n + (4 - remainder)


def _split_headers(body: bytes, start: int) -> tuple[bytes, int] | None:
    """Return the header block of a part and the offset where its content begins."""
    if body.startswith(b"\r\n", start):
        return b"", start + 2
    if body.startswith(b"\n", start):
        return b"", start + 1
    candidates = [
        (idx, idx + len(sep))
        for sep in (b"\r\n\r\n", b"\n\n")
        if (idx := body.find(sep, start)) >= 0
    ]
    if not candidates:
        return None
    header_end, content_start = min(candidates)
    return body[start:header_end], content_start


def _transfer_encoding(headers: bytes) -> str:
    for line in headers.decode("latin-1").splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-transfer-encoding":
            return value.strip().lower()
    return ""


def parse_multipart(body: bytes, boundary: str) -> bytes:
    """Return the content of the second part of a MIME multipart body."""
    delim = b"--" + boundary.encode("latin-1")
    if body.startswith(delim):
        pos = 0
    else:
        idx = body.find(b"\n" + delim)
        if idx < 0:
            raise DimeError("DIME: no file attachment found in multipart response (got 0 parts)")
        pos = idx + 1

    index = 0
    while True:
        pos += len(delim)
        if body.startswith(b"--", pos):
            break
        eol = body.find(b"\n", pos)
        if eol < 0:
            break
        split = _split_headers(body, eol + 1)
        if split is None:
            raise DimeError(
                f"DIME: failed to read multipart section {index + 1}: malformed MIME header"
            )
        headers, content_start = split
        index += 1

        nxt = body.find(b"\n" + delim, content_start - 1)
        if nxt < 0:
            if index == 2:
                raise DimeError("DIME: failed to read file attachment: unexpected EOF")
            raise DimeError("DIME: failed to skip SOAP part: unexpected EOF")

        if index == 2:
            end = nxt
            if end > content_start and body[end - 1 : end] == b"\r":
                end -= 1
            content = body[content_start : max(end, content_start)]
            if _transfer_encoding(headers) == "quoted-printable":
                content = quopri.decodestring(content)
            return content
        pos = nxt + 1

    raise DimeError(f"DIME: no file attachment found in multipart response (got {index} parts)")


def parse_dime(data: bytes) -> bytes:
    """Return the file payload carried after the first record of a DIME message."""
    pos = 0
    record_index = 0
    chunks = bytearray()
    collecting = False

    while len(data) - pos >= 12:
        header = data[pos : pos + 12]
        pos += 12

        version = (header[0] >> 3) & 0x1F
        if version != RECORD_VERSION:
            raise DimeError(f"DIME: unexpected record version {version} (expected 1)")
        message_end = (header[0] >> 1) & 0x01
        chunked = header[0] & 0x01

        options_len, id_len, type_len, data_len = struct.unpack(">HHHI", header[2:12])

        skip = pad_to_4(options_len) + pad_to_4(id_len) + pad_to_4(type_len)
        if skip:
            if len(data) - pos < skip:
                raise DimeError("DIME: failed to skip record metadata: unexpected EOF")
            pos += skip

        padded = pad_to_4(data_len)
        if padded and len(data) - pos < padded:
            raise DimeError("DIME: failed to read record data: unexpected EOF")
        payload = data[pos : pos + data_len]
        pos += padded

        if record_index >= 1 or collecting:
            collecting = True
            chunks += payload
            if chunked == 0:
                return bytes(chunks)

        record_index += 1
        if message_end:
            break

    if collecting:
        return bytes(chunks)
    raise DimeError("DIME: no file attachment found in response")


def extract_fault(body: bytes | str) -> str:
    """Return the SOAP fault string of a body, or the body itself cut to 500 characters."""
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    start = text.find(_FAULT_OPEN)
    if start >= 0:
        end = text.find(_FAULT_CLOSE, start)
        if end >= 0:
            return text[start + len(_FAULT_OPEN) : end]
    if len(text) > 500:
        return text[:500] + "..."
    return text


def get_file(
    host: str,
    user: str,
    password: str,
    file_path: str,
    session: requests.Session | None = None,
) -> bytes:
    """Download one log file from a node and return its bytes."""
    file_path = normalize_log_path(file_path)
    envelope = build_envelope(file_path)
    url = SERVICE_URL.format(host=host)

    if debug_enabled():
        print(f"=== DIME Request ===\nURL: {url}\n{envelope}", file=sys.stderr)

    if session is None:
        session = requests.Session()
        session.verify = False

    headers = {
        "Content-Type": "text/xml; charset=utf-8",
        "SOAPAction": SOAP_ACTION,
    }
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Unverified HTTPS request")
        try:
            resp = session.post(
                url,
                data=envelope.encode("utf-8"),
                headers=headers,
                auth=(user, password),
                timeout=TIMEOUT,
            )
        except requests.RequestException as exc:
            raise DimeError(f"DIME request failed: {exc}") from exc

    body = resp.content
    content_type = resp.headers.get("Content-Type", "")
    if debug_enabled():
        print(
            f"=== DIME Response HTTP {resp.status_code} CT={content_type!r} size={len(body)} ===",
            file=sys.stderr,
        )

    if resp.status_code != 200:
        raise DimeError(
            f"DIME error (HTTP {resp.status_code}): {extract_fault(body)}", resp.status_code
        )

    parsed = Message()
    parsed["Content-Type"] = content_type
    media_type = parsed.get_content_type() if content_type else ""

    if media_type.startswith("multipart/"):
        boundary = parsed.get_boundary() or ""
        if not boundary:
            raise DimeError(
                "DIME: multipart/related response missing boundary parameter "
                f"in Content-Type: {content_type}"
            )
        return parse_multipart(body, boundary)
    if "application/dime" in content_type:
        return parse_dime(body)
    raise DimeError(
        f"DIME: unexpected response Content-Type {content_type!r} (HTTP {resp.status_code})"
    )