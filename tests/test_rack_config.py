from rack_config import get_settings
from rack_model import DEFAULT_UNIT_HEIGHT


def test_defaults(monkeypatch):
    for name in ("RACK_DOCS_OUTPUT_DIR", "RACK_DOCS_COMPANY", "RACK_DOCS_PAGE_SIZE",
                 "RACK_POWER_TOLERANCE_W", "RACK_UNIT_HEIGHT_PX"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.output_dir == "."
    assert settings.page_size == "letter"
    assert settings.power_tolerance_w == 0.0
    assert settings.unit_height == DEFAULT_UNIT_HEIGHT


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RACK_DOCS_COMPANY", "BlueDog Group")
    monkeypatch.setenv("RACK_DOCS_PAGE_SIZE", "A4")
    monkeypatch.setenv("RACK_POWER_TOLERANCE_W", "5")
    monkeypatch.setenv("RACK_UNIT_HEIGHT_PX", "24")
    settings = get_settings()
    assert settings.company_name == "BlueDog Group"
    assert settings.page_size == "a4"
    assert settings.power_tolerance_w == 5.0
    assert settings.unit_height == 24.0


def test_bad_values_fall_back(monkeypatch, capsys):
    monkeypatch.setenv("RACK_DOCS_PAGE_SIZE", "legal")
    monkeypatch.setenv("RACK_POWER_TOLERANCE_W", "lots")
    monkeypatch.setenv("RACK_UNIT_HEIGHT_PX", "-3")
    settings = get_settings()
    assert settings.page_size == "letter"
    assert settings.power_tolerance_w == 0.0
    assert settings.unit_height == DEFAULT_UNIT_HEIGHT
    assert "⚠️" in capsys.readouterr().out
