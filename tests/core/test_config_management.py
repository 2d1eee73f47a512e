# tests/core/test_config_management.py
import json

import pytest
from pydantic import ValidationError

from calamine.managers.config_manager import ConfigManager
from calamine.model import ExtractionSettings
from calamine.utils.path_utils import PathUtils

# Een standaard, voorspelbare configuratie voor onze tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "extraction": {
        "row_scan_limit": 7,
        "emphasis_unwrap_threshold": 300,
        "annotate": False,
        "unknown_option": "ignored"
    },
    "batch": {
        "workers": 2,
        "pattern": "*.htm"
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Een fixture die een geïsoleerde testomgeving opzet voor de ConfigManager:
    - Plaatst een nep 'settings.json' in een tijdelijke package root.
    - Monkeypatched PathUtils zodat er geen echt gebruikersbestand gelezen wordt.
    """
    package_root = tmp_path / "calamine"
    package_root.mkdir()
    settings_file = package_root / "settings.json"
    settings_file.write_text(json.dumps(MOCK_SETTINGS_CONTENT))
    user_file = tmp_path / "home" / ".calamine" / "settings.json"

    monkeypatch.setattr(PathUtils, "get_settings_file", lambda: settings_file)
    monkeypatch.setattr(PathUtils, "get_user_settings_file", lambda: user_file)

    # De singleton is al geladen; forceer herladen vanuit ons nep-bestand
    manager = ConfigManager()
    manager.reset()

    yield manager, user_file

    # Herstel de echte configuratie voor de overige tests
    monkeypatch.undo()
    manager.reset()


# --- Tests voor de ConfigManager direct ---

def test_config_manager_is_singleton(config_env):
    manager, _ = config_env
    assert ConfigManager() is manager


def test_config_manager_load(config_env):
    """Test of de manager de configuratie correct laadt."""
    manager, _ = config_env
    config = manager.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["extraction"]["row_scan_limit"] == 7


def test_config_manager_get_nested(config_env):
    """Test het ophalen van geneste waarden."""
    manager, _ = config_env
    assert manager.get_nested("batch.pattern") == "*.htm"
    assert manager.get_nested("batch.missing", "default") == "default"
    assert manager.get_nested("batch.pattern.deeper", 1) == 1


def test_config_manager_set_nested_casts_types(config_env):
    """Test of nieuwe waarden naar het type van de oude waarde gecast worden."""
    manager, _ = config_env
    assert manager.set_nested("extraction.row_scan_limit", "12")
    assert manager.get_nested("extraction.row_scan_limit") == 12

    assert manager.set_nested("extraction.annotate", "true")
    assert manager.get_nested("extraction.annotate") is True
    assert manager.set_nested("extraction.annotate", "off")
    assert manager.get_nested("extraction.annotate") is False

    # Niet te casten waarden worden als string bewaard
    manager.set_nested("batch.workers", "many")
    assert manager.get_nested("batch.workers") == "many"


def test_config_manager_set_nested_creates_sections(config_env):
    manager, _ = config_env
    assert manager.set_nested("new.section.value", 3)
    assert manager.get_nested("new.section.value") == 3
    assert not manager.set_nested("batch.pattern.deeper", 1)


def test_config_manager_reset(config_env):
    """Test of een reset de in-memory wijzigingen ongedaan maakt."""
    manager, _ = config_env
    manager.set_nested("extraction.row_scan_limit", 99)
    manager.reset()
    assert manager.get_nested("extraction.row_scan_limit") == 7


def test_user_settings_are_merged(config_env):
    """Het gebruikersbestand overschrijft alleen de opgegeven sleutels."""
    manager, user_file = config_env
    user_file.parent.mkdir(parents=True)
    user_file.write_text(json.dumps({"extraction": {"annotate": True}}))
    manager.reset()

    assert manager.get_nested("extraction.annotate") is True
    assert manager.get_nested("extraction.row_scan_limit") == 7


def test_missing_settings_file_gives_empty_config(config_env, tmp_path, monkeypatch):
    manager, _ = config_env
    monkeypatch.setattr(PathUtils, "get_settings_file", lambda: tmp_path / "missing.json")
    manager.reset()
    assert manager.get_all() == {}


# --- Tests voor ExtractionSettings.from_config ---

def test_extraction_settings_from_config(config_env):
    """De extraction-sectie vult de instellingen; onbekende sleutels worden genegeerd."""
    settings = ExtractionSettings.from_config()
    assert settings.row_scan_limit == 7
    assert settings.emphasis_unwrap_threshold == 300
    assert settings.annotate is False
    assert "article" in settings.signatures


def test_extraction_settings_overrides_win(config_env):
    """Expliciete waarden gaan voor de configuratie, None wordt genegeerd."""
    settings = ExtractionSettings.from_config(row_scan_limit=3, annotate=None, signatures=["main"])
    assert settings.row_scan_limit == 3
    assert settings.annotate is False
    assert settings.signatures == ["main"]


def test_extraction_settings_validation(config_env):
    manager, _ = config_env
    manager.set_nested("extraction.row_scan_limit", -1)
    with pytest.raises(ValidationError):
        ExtractionSettings.from_config()
