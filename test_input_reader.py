"""Tests for the input descriptor reader and environment configuration."""

import json
from pathlib import Path

import pytest

from connectors.sap.sap_caller import ALL_RESOURCES, expand_accepter
from connectors.sap.sap_input_reader import FileReader, SAPInputError
from connectors.sap.sap_models import ProfitCenterKey, ProfitCenterTextKey
from core.config import SAPConfig

SAMPLE_PATH = Path(__file__).resolve().parent / "Inputs" / "SDC_Profit_Center_Profit_Center_Name_sample.json"


def write_sdc(tmp_path, **overrides):
    data = {
        "connection_key": "request",
        "redis_key": "abc",
        "ProfitCenter": {
            "ControllingArea": "1000",
            "ProfitCenter": "YB200",
            "ValidityEndDate": "9999-12-31",
            "Text": {"Language": "EN", "ProfitCenterName": "Finance"},
        },
        "accepter": [],
    }
    data.update(overrides)
    path = tmp_path / "sdc.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestFileReader:

    def test_reads_keys(self, tmp_path):
        sdc = FileReader().read_sdc(write_sdc(tmp_path))

        assert sdc.profit_center_key == ProfitCenterKey(controlling_area="1000", profit_center="YB200")
        assert sdc.text_key == ProfitCenterTextKey(language="EN", profit_center_name="Finance")
        assert sdc.RedisKey == "abc"

    def test_dates_converted_to_sap_format(self, tmp_path):
        sdc = FileReader().read_sdc(write_sdc(tmp_path))
        assert sdc.ProfitCenter.ValidityEndDate == "/Date(253402214400000)/"

    @pytest.mark.parametrize("accepter", [[], None, ["All"]])
    def test_empty_or_all_accepter_expands(self, tmp_path, accepter):
        sdc = FileReader().read_sdc(write_sdc(tmp_path, accepter=accepter))
        assert expand_accepter(sdc.Accepter) == list(ALL_RESOURCES)

    def test_accepter_kept(self, tmp_path):
        sdc = FileReader().read_sdc(write_sdc(tmp_path, accepter=["Header"]))
        assert expand_accepter(sdc.Accepter) == ["Header"]

    def test_missing_accepter_defaults_to_empty(self, tmp_path):
        path = write_sdc(tmp_path)
        data = json.loads(path.read_text(encoding="utf-8"))
        del data["accepter"]
        path.write_text(json.dumps(data), encoding="utf-8")
        assert FileReader().read_sdc(path).Accepter == []

    def test_bundled_sample(self):
        sdc = FileReader().read_sdc(SAMPLE_PATH)
        assert sdc.profit_center_key.profit_center == "YB200"
        assert expand_accepter(sdc.Accepter) == list(ALL_RESOURCES)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SAPInputError, match="not found"):
            FileReader().read_sdc(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(SAPInputError):
            FileReader().read_sdc(path)

    def test_missing_key_fields(self, tmp_path):
        path = write_sdc(tmp_path, ProfitCenter={"ControllingArea": "1000"})
        with pytest.raises(SAPInputError, match="Invalid input file"):
            FileReader().read_sdc(path)


class TestSAPConfig:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("SAP_BASE_URL", "SAP_USER", "SAP_PASSWORD", "SAP_CLIENT",
                     "SAP_TIMEOUT_SECONDS", "SAP_INPUT_PATH", "LOG_LEVEL", "LOG_JSON"):
            monkeypatch.delenv(name, raising=False)

    def test_requires_base_url(self):
        with pytest.raises(ValueError, match="SAP_BASE_URL"):
            SAPConfig.from_env(load_env_file=False)

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("SAP_BASE_URL", "https://sap.example.com/sap/opu/odata/sap/")

        config = SAPConfig.from_env(load_env_file=False)

        assert config.base_url() == "https://sap.example.com/sap/opu/odata/sap"
        assert config.sap_client == "100"
        assert config.timeout_seconds == 30.0
        assert config.has_credentials is False
        assert config.log_json is False

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("SAP_BASE_URL", "https://sap.example.com")
        monkeypatch.setenv("SAP_USER", "alice")
        monkeypatch.setenv("SAP_PASSWORD", "secret")
        monkeypatch.setenv("SAP_CLIENT", "200")
        monkeypatch.setenv("SAP_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_JSON", "true")

        config = SAPConfig.from_env(load_env_file=False)

        assert config.has_credentials
        assert config.sap_client == "200"
        assert config.timeout_seconds == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_json is True

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("SAP_BASE_URL", "https://sap.example.com")
        monkeypatch.setenv("SAP_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ValueError, match="SAP_TIMEOUT_SECONDS"):
            SAPConfig.from_env(load_env_file=False)
