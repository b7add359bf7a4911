import xml.etree.ElementTree as ET

from fastapi.testclient import TestClient

from backend.api.main import app
from backend import metrics


DBC = """
VERSION "1.0"
NS_ :
BS_:
BU_: ECU
BO_ 100 Speed: 8 ECU
 SG_ kph : 0|12@1+ (1,0) [0|4095] "km/h" ECU
BO_ 200 Engine: 8 ECU
 SG_ Rpm : 0|20@1+ (1,0) [0|1000000] "rpm" ECU
 SG_ Temp : 24|8@1+ (1,0) [0|255] "" ECU
"""

WIDE_DBC = """
VERSION "1.0"
NS_ :
BS_:
BU_: ECU
BO_ 300 Wide: 8 ECU
 SG_ Big : 0|64@1+ (1,0) [0|1] "" ECU
"""


def _upload(name, contents):
    return {"file": (name, contents, "text/plain")}


def setup_function():
    metrics.reset_all()


def test_convert_returns_xml_document():
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", files=_upload("vehicle.dbc", DBC))
    assert r.status_code == 200, r.text
    assert r.headers["content-type"].startswith("application/xml")
    root = ET.fromstring(r.text)
    sends = [sp for sp in root.iter("SP") if sp.get("Procedure") == "Write"]
    assert [sp.get("Name") for sp in sends] == ["CAN Send (Speed - 100)", "CAN Send (Engine - 200)"]
    engine_blocks = [(bb.get("Name"), bb.get("Size")) for bb in sends[1].iter("BB")]
    assert engine_blocks == [("Rpm (LSB)", "16"), ("Rpm (MSB)", "4"), ("UNKNOWN", "4"), ("Temp", "8")]
    assert "Generated on:" not in r.text


def test_convert_with_timestamps():
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", params={"timestamps": "true"}, files=_upload("vehicle.dbc", DBC))
    assert r.status_code == 200
    assert "Generated on:" in r.text


def test_convert_is_repeatable():
    with TestClient(app) as client:
        first = client.post("/api/bsm/convert", files=_upload("vehicle.dbc", DBC)).text
        second = client.post("/api/bsm/convert", files=_upload("vehicle.dbc", DBC)).text
    assert first == second


def test_convert_rejects_non_dbc_upload():
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", files=_upload("vehicle.txt", DBC))
    assert r.status_code == 400


def test_convert_rejects_unparseable_dbc():
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", files=_upload("bad.dbc", "BO_ this is not a dbc"))
    assert r.status_code == 400
    assert "DBC parse error" in r.json()["detail"]
    assert metrics.get("bsm_convert_error") == 1


def test_oversized_frame_reports_kind():
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", files=_upload("wide.dbc", WIDE_DBC))
    assert r.status_code == 422
    body = r.json()
    assert body["kind"] == "oversized_frame"
    assert body["message_name"] == "Wide"


def test_layout_endpoint():
    with TestClient(app) as client:
        r = client.post("/api/bsm/layout", files=_upload("vehicle.dbc", DBC))
    assert r.status_code == 200, r.text
    layouts = r.json()
    assert isinstance(layouts, list)
    assert [m["name"] for m in layouts] == ["Speed", "Engine"]
    assert layouts[0]["padding_size"] == 16
    assert layouts[1]["padding_size"] == 32
    assert [b["name"] for b in layouts[1]["blocks"]] == ["Rpm", "UNKNOWN", "Temp"]
    assert metrics.get("bsm_layout_requests") == 1


def test_invalid_oversize_policy_is_reported(monkeypatch):
    monkeypatch.setenv("DBC2BSM_OVERSIZE_POLICY", "bogus")
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", files=_upload("vehicle.dbc", DBC))
    assert r.status_code == 503
    assert "oversize" in r.json()["detail"].lower()
    assert metrics.get("bsm_config_error") == 1
    assert metrics.get("bsm_convert_ok") == 0


def test_invalid_baudrate_is_not_written(monkeypatch):
    monkeypatch.setenv("DBC2BSM_BAUDRATE", "12345")
    with TestClient(app) as client:
        convert = client.post("/api/bsm/convert", files=_upload("vehicle.dbc", DBC))
        layout = client.post("/api/bsm/layout", files=_upload("vehicle.dbc", DBC))
    assert convert.status_code == 503
    assert "12345" in convert.json()["detail"]
    assert "ASCIIValue" not in convert.text
    assert layout.status_code == 503


def test_valid_environment_settings_are_used(monkeypatch):
    monkeypatch.setenv("DBC2BSM_BAUDRATE", "500000")
    with TestClient(app) as client:
        r = client.post("/api/bsm/convert", files=_upload("vehicle.dbc", DBC))
    assert r.status_code == 200
    assert 'ASCIIValue="500000"' in r.text
