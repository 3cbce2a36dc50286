from __future__ import annotations

import base64

import pytest

from config import SapSettings
from services import gateway
from services.sap_client import SapUpstreamError

LOGIN_XML = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<entry xmlns="http://www.w3.org/2005/Atom" '
    'xmlns:m="http://schemas.microsoft.com/ado/2007/08/dataservices/metadata" '
    'xmlns:d="http://schemas.microsoft.com/ado/2007/08/dataservices">'
    '<content type="application/xml"><m:properties>'
    "<d:VendorId>100000</d:VendorId><d:VendorPwd></d:VendorPwd>"
    "<d:Status>{status}</d:Status><d:Message>{message}</d:Message>"
    "</m:properties></content></entry>"
)


def test_goods_receipts_use_padded_vendor_key(sap_settings, fake_sap):
    fake_sap.bodies["VEN_GOODSRECSet"] = {"d": {"results": [{"Mblnr": "5000000001"}]}}

    rows = gateway.fetch_rows(sap_settings, gateway.GOODS_RECEIPTS, "100000")

    assert rows == [{"Mblnr": "5000000001"}]
    assert fake_sap.paths == ["VEN_GOODSRECSet?$filter=Lifnr eq '0000100000'&$format=json"]


def test_other_resources_keep_vendor_id_as_supplied(sap_settings, fake_sap):
    gateway.fetch_rows(sap_settings, gateway.PURCHASE_ORDERS, "100000")
    gateway.fetch_rows(sap_settings, gateway.INVOICES, "0000100000")
    assert fake_sap.paths == [
        "VEN_POSet?$filter=Lifnr eq '100000'&$format=json",
        "VEN_INVOICESet?$filter=Lifnr eq '0000100000'&$format=json",
    ]


def test_empty_goods_receipts_are_not_found(sap_settings, fake_sap):
    with pytest.raises(gateway.ResourceNotFoundError) as excinfo:
        gateway.fetch_rows(sap_settings, gateway.GOODS_RECEIPTS, "100000")
    assert "not found" in str(excinfo.value)
    assert excinfo.value.status_code == 404


def test_empty_purchase_orders_are_an_empty_list(sap_settings, fake_sap):
    assert gateway.fetch_rows(sap_settings, gateway.PURCHASE_ORDERS, "100000") == []


def test_blank_vendor_id_is_rejected_without_calling_sap(sap_settings, fake_sap):
    for blank in (None, "", "   "):
        with pytest.raises(gateway.MissingIdentifierError):
            gateway.fetch_rows(sap_settings, gateway.RFQ, blank)
    assert fake_sap.paths == []


def test_goods_receipt_allow_list(fake_sap):
    settings = SapSettings(
        base_url="https://sap", username="u", password="p", goods_receipt_allowed_vendors=("100000",)
    )
    fake_sap.bodies["VEN_GOODSRECSet"] = {"d": {"results": [{"Mblnr": "1"}]}}

    with pytest.raises(gateway.ResourceNotFoundError) as excinfo:
        gateway.fetch_rows(settings, gateway.GOODS_RECEIPTS, "200000")
    assert "Access denied" in str(excinfo.value)
    assert fake_sap.paths == []

    assert gateway.fetch_rows(settings, gateway.GOODS_RECEIPTS, "0000100000") == [{"Mblnr": "1"}]


def test_fetch_all_memos_has_no_filter(sap_settings, fake_sap):
    fake_sap.bodies["ZVEN_CDMEMOSet"] = {"d": {"results": [{"Belnr": "1"}, {"Belnr": "2"}]}}
    assert len(gateway.fetch_all_memos(sap_settings)) == 2
    assert fake_sap.paths == ["ZVEN_CDMEMOSet?$format=json"]


def test_fetch_profile(sap_settings, fake_sap):
    fake_sap.bodies["ZVEN_PROFILESet"] = {"d": {"VendorId": "100000", "Name1": "ACME"}}
    assert gateway.fetch_profile(sap_settings, "100000")["Name1"] == "ACME"
    assert fake_sap.paths == ["ZVEN_PROFILESet(VendorId='100000')?$format=json"]


def test_fetch_profile_empty_is_not_found(sap_settings, fake_sap):
    fake_sap.bodies["ZVEN_PROFILESet"] = {"d": {"results": []}}
    with pytest.raises(gateway.ResourceNotFoundError):
        gateway.fetch_profile(sap_settings, "100000")


def test_fetch_invoice_pdf_pads_both_keys(sap_settings, fake_sap):
    pdf = b"%PDF-1.4 invoice"
    fake_sap.bodies["ZVEN_INVOICEPDFSet"] = {"d": {"XPdf": base64.b64encode(pdf).decode("ascii")}}

    filename, content = gateway.fetch_invoice_pdf(sap_settings, "100000", "12345")

    assert filename == "invoice_0000012345.pdf"
    assert content == pdf
    assert fake_sap.paths == ["ZVEN_INVOICEPDFSet(Lifnr='0000100000',Belnr='0000012345')?$format=json"]


def test_fetch_invoice_pdf_missing_or_bad_payload(sap_settings, fake_sap):
    fake_sap.bodies["ZVEN_INVOICEPDFSet"] = {"d": {"Belnr": "0000012345"}}
    with pytest.raises(gateway.InvalidPdfError) as excinfo:
        gateway.fetch_invoice_pdf(sap_settings, "100000", "12345")
    assert str(excinfo.value) == "Failed to retrieve PDF data"
    assert "XPdf" in excinfo.value.details

    fake_sap.bodies["ZVEN_INVOICEPDFSet"] = {"d": {"XPdf": "%%%"}}
    with pytest.raises(gateway.InvalidPdfError):
        gateway.fetch_invoice_pdf(sap_settings, "100000", "12345")


def test_fetch_invoice_pdf_requires_both_keys(sap_settings, fake_sap):
    with pytest.raises(gateway.MissingIdentifierError):
        gateway.fetch_invoice_pdf(sap_settings, "100000", " ")


def test_parse_login_properties():
    props = gateway.parse_login_properties(LOGIN_XML.format(status="SUCCESS", message="Welcome"))
    assert props["Status"] == "SUCCESS"
    assert props["Message"] == "Welcome"
    assert props["VendorPwd"] is None
    assert gateway.parse_login_properties("<not-xml") == {}
    assert gateway.parse_login_properties("") == {}


def test_authenticate_vendor_success_is_case_insensitive(sap_settings, fake_sap):
    fake_sap.xml = LOGIN_XML.format(status="Success", message="Hello")
    result = gateway.authenticate_vendor(sap_settings, "100000", "pw")
    assert result.success is True
    assert result.message == "Hello"
    assert fake_sap.paths == ["ZLOGIN_AUTHSet(VendorId='100000',VendorPwd='pw')"]


def test_authenticate_vendor_failure_statuses(sap_settings, fake_sap):
    fake_sap.xml = LOGIN_XML.format(status="FAILED", message="Wrong password")
    assert gateway.authenticate_vendor(sap_settings, "100000", "pw").success is False

    fake_sap.xml = "garbage"
    result = gateway.authenticate_vendor(sap_settings, "100000", "pw")
    assert result.success is False
    assert result.status is None


def test_authenticate_vendor_requires_credentials(sap_settings, fake_sap):
    with pytest.raises(gateway.MissingIdentifierError):
        gateway.authenticate_vendor(sap_settings, "100000", "")
    assert fake_sap.paths == []


def test_upstream_errors_propagate(sap_settings, fake_sap):
    fake_sap.errors["VEN_INVOICESet"] = SapUpstreamError(403, "No authorization")
    with pytest.raises(SapUpstreamError):
        gateway.fetch_rows(sap_settings, gateway.INVOICES, "100000")


def test_gateway_closes_each_client_it_creates(sap_settings, fake_sap):
    gateway.fetch_rows(sap_settings, gateway.PURCHASE_ORDERS, "100000")
    gateway.fetch_all_memos(sap_settings)
    fake_sap.errors["VEN_INVOICESet"] = SapUpstreamError(500, "Dump")
    with pytest.raises(SapUpstreamError):
        gateway.fetch_rows(sap_settings, gateway.INVOICES, "100000")
    assert fake_sap.closed == 3


def test_gateway_closes_real_sessions(monkeypatch, sap_settings):
    sessions = []

    class Resp:
        status_code = 200
        text = '{"d": {"results": []}}'
        reason = "OK"

        def json(self):
            return {"d": {"results": []}}

    class Session:
        def __init__(self):
            self.closed = False

        def get(self, url, **kwargs):
            return Resp()

        def close(self):
            self.closed = True

    class StubAuth:
        def __init__(self, settings):
            pass

        def new_session(self):
            sessions.append(Session())
            return sessions[-1]

    monkeypatch.setattr("services.sap_client.SapAuth", StubAuth)
    for _ in range(3):
        gateway.fetch_rows(sap_settings, gateway.PURCHASE_ORDERS, "100000")

    assert len(sessions) == 3
    assert all(session.closed for session in sessions)


def test_caller_supplied_client_is_not_closed(sap_settings, fake_sap):
    own = type(fake_sap)()
    gateway.fetch_rows(sap_settings, gateway.PURCHASE_ORDERS, "100000", client=own)
    assert own.paths == ["VEN_POSet?$filter=Lifnr eq '100000'&$format=json"]
    assert own.closed == 0


def test_fetch_invoice_pdf_pads_alphanumeric_document_number(sap_settings, fake_sap):
    fake_sap.bodies["ZVEN_INVOICEPDFSet"] = {"d": {"XPdf": base64.b64encode(b"%PDF").decode("ascii")}}
    filename, _ = gateway.fetch_invoice_pdf(sap_settings, "100000", "AB123")
    assert filename == "invoice_00000AB123.pdf"
    assert fake_sap.paths == ["ZVEN_INVOICEPDFSet(Lifnr='0000100000',Belnr='00000AB123')?$format=json"]
