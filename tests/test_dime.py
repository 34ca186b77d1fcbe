import struct
import xml.etree.ElementTree as ET

import pytest
import responses

from cupi import dime
from cupi.dime import (
    DimeError,
    build_envelope,
    extract_fault,
    get_file,
    normalize_log_path,
    pad_to_4,
    parse_dime,
    parse_multipart,
)

HOST = "cuc.example.com"
URL = dime.SERVICE_URL.format(host=HOST)


def _pad(data: bytes) -> bytes:
    return data + b"\x00" * ((-len(data)) % 4)


def _record(payload: bytes, *, me=0, cf=0, version=1, rec_id=b"", rec_type=b"", options=b""):
    first = (version << 3) | (me << 1) | cf
    header = bytes([first, 0]) + struct.pack(
        ">HHHI", len(options), len(rec_id), len(rec_type), len(payload)
    )
    return header + _pad(options) + _pad(rec_id) + _pad(rec_type) + _pad(payload)


def _multipart(boundary: bytes, parts):
    out = b""
    for headers, content in parts:
        out += b"--" + boundary + b"\r\n" + headers + b"\r\n\r\n" + content + b"\r\n"
    return out + b"--" + boundary + b"--\r\n"


SOAP = b"<soap>reply</soap>"


@pytest.mark.parametrize(
    "given, expected",
    [
        ("/var/log/active/cuc/diag.log", "/var/log/active/cuc/diag.log"),
        ("/var/log/inactive/x.log", "/var/log/inactive/x.log"),
        ("cuc/diag.log", "/var/log/active/cuc/diag.log"),
        ("/cuc/diag.log", "/var/log/active/cuc/diag.log"),
    ],
)
def test_normalize_log_path(given, expected):
    assert normalize_log_path(given) == expected


def test_build_envelope_is_xml_with_file_name():
    text = build_envelope("/var/log/active/a.log")
    root = ET.fromstring(text.encode("utf-8"))
    names = [el.text for el in root.iter() if el.tag == "FileName"]
    assert names == ["/var/log/active/a.log"]


@pytest.mark.parametrize("n", range(0, 17))
def test_pad_to_4_invariants(n):
    result = pad_to_4(n)
    assert result % 4 == 0
    assert 0 <= result - n < 4


def test_parse_dime_second_record_is_file():
    data = _record(SOAP, rec_type=b"text/xml") + _record(b"hello log", me=1, rec_id=b"abc")
    assert parse_dime(data) == b"hello log"


def test_parse_dime_joins_chunks():
    data = (
        _record(SOAP)
        + _record(b"part-one ", cf=1, rec_type=b"application/octet-stream")
        + _record(b"part-two ", cf=1)
        + _record(b"end", me=1)
    )
    assert parse_dime(data) == b"part-one part-two end"


def test_parse_dime_chunks_without_final_record():
    data = _record(SOAP) + _record(b"abc", cf=1)
    assert parse_dime(data) == b"abc"


def test_parse_dime_only_soap_record():
    with pytest.raises(DimeError, match="no file attachment"):
        parse_dime(_record(SOAP, me=1))


def test_parse_dime_empty():
    with pytest.raises(DimeError, match="no file attachment"):
        parse_dime(b"")


def test_parse_dime_bad_version():
    with pytest.raises(DimeError, match="unexpected record version 2"):
        parse_dime(_record(SOAP, version=2))


def test_parse_dime_truncated_payload():
    data = _record(SOAP) + _record(b"0123456789", me=1)
    with pytest.raises(DimeError, match="failed to read record data"):
        parse_dime(data[:-6])


def test_parse_dime_truncated_metadata():
    full = _record(SOAP, rec_type=b"text/xml")
    with pytest.raises(DimeError, match="failed to skip record metadata"):
        parse_dime(full[:14])


def test_parse_multipart_returns_second_part():
    content = b"line one\r\nline two\n\x00\xff binary"
    body = _multipart(
        b"MIMEBoundary",
        [(b"Content-Type: text/xml", SOAP), (b"Content-Type: application/octet-stream", content)],
    )
    assert parse_multipart(body, "MIMEBoundary") == content


def test_parse_multipart_with_preamble():
    body = b"preamble text\r\n" + _multipart(
        b"b1", [(b"Content-Type: text/xml", SOAP), (b"Content-Id: <file>", b"data")]
    )
    assert parse_multipart(body, "b1") == b"data"


def test_parse_multipart_quoted_printable():
    body = _multipart(
        b"qp",
        [
            (b"Content-Type: text/xml", SOAP),
            (b"Content-Transfer-Encoding: quoted-printable", b"a=3Db"),
        ],
    )
    assert parse_multipart(body, "qp") == b"a=b"


def test_parse_multipart_single_part():
    body = _multipart(b"only", [(b"Content-Type: text/xml", SOAP)])
    with pytest.raises(DimeError, match=r"got 1 parts"):
        parse_multipart(body, "only")


def test_parse_multipart_no_boundary():
    with pytest.raises(DimeError, match=r"got 0 parts"):
        parse_multipart(b"nothing here", "missing")


def test_parse_multipart_unterminated_attachment():
    body = b"--b\r\nContent-Type: text/xml\r\n\r\n<x/>\r\n--b\r\nContent-Id: f\r\n\r\nhalf"
    with pytest.raises(DimeError, match="failed to read file attachment"):
        parse_multipart(body, "b")


def test_extract_fault_finds_fault_string():
    body = b"<Envelope><Fault><faultstring>File not found</faultstring></Fault></Envelope>"
    assert extract_fault(body) == "File not found"


def test_extract_fault_truncates_long_body():
    result = extract_fault(b"x" * 600)
    assert result == "x" * 500 + "..."


def test_extract_fault_short_body_unchanged():
    assert extract_fault("plain error") == "plain error"


def test_get_file_multipart():
    content = b"log contents\n"
    body = _multipart(
        b"MIMEBoundary", [(b"Content-Type: text/xml", SOAP), (b"Content-Id: <f>", content)]
    )
    password = "password"
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST,
            URL,
            body=body,
            status=200,
            content_type='multipart/related; type="text/xml"; boundary=MIMEBoundary',
        )
        result = get_file(HOST, "user", password, "cuc/diag.log")
        request = rsps.calls[0].request
    assert result == content
    assert request.headers["SOAPAction"] == dime.SOAP_ACTION
    assert request.headers["Authorization"].startswith("Basic ")
    assert b"<FileName xsi:type=\"xsd:string\">/var/log/active/cuc/diag.log</FileName>" in request.body


def test_get_file_dime_body():
    data = _record(SOAP) + _record(b"dime file", me=1)
    password = "password"
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, body=data, status=200, content_type="application/dime")
        assert get_file(HOST, "user", password, "/var/log/active/a.log") == b"dime file"


def test_get_file_http_error_reports_fault():
    fault = b"<Fault><faultstring>Access denied</faultstring></Fault>"
    password = "password"
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, body=fault, status=500, content_type="text/xml")
        with pytest.raises(DimeError, match="HTTP 500.*Access denied") as info:
            get_file(HOST, "user", password, "a.log")
    assert info.value.status == 500


def test_get_file_unexpected_content_type():
    password = "password"
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, body=b"<html/>", status=200, content_type="text/html")
        with pytest.raises(DimeError, match="unexpected response Content-Type"):
            get_file(HOST, "user", password, "a.log")


def test_get_file_multipart_without_boundary():
    password = "password"
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, body=b"x", status=200, content_type="multipart/related")
        with pytest.raises(DimeError, match="missing boundary"):
            get_file(HOST, "user", password, "a.log")