# File: config.py
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

# Переменные из .env (если он есть) подхватываются до первого чтения os.environ
load_dotenv()

APP_DIR = Path(__file__).resolve().parent

SETTINGS_ORG_NAME = "vilimpoc"
SETTINGS_APP_NAME = "FabrikUml"

WORK_FOLDER_NAME = ".FabrikUml"
UNTITLED_FILE_PREFIX = "FabrikUml-"
UNTITLED_FILE_SUFFIX = ".txt"

DEFAULT_HIGHLIGHT_DELAY_MS = 500

SAMPLE_DIAGRAM = "\n".join([
    "!define",
    "",
    "@startuml",
    "",
    "actor",
    "",
    "Alice -> Bob: Authentication Request",
    "Bob --> Alice: Authentication Response",
    "",
    "Alice -> Bob: Another authentication Request",
    "Alice <-- Bob: another authentication Response",
    "@enduml",
])


class ConfigError(ValueError):
    pass


class AppConfig(BaseModel):
    highlight_delay_ms: int = Field(DEFAULT_HIGHLIGHT_DELAY_MS, ge=0, le=10_000)
    highlight_workers: int = Field(1, ge=1, le=4)
    plantuml_jar: Path | None = None
    render_timeout_s: float = Field(20.0, gt=0)
    work_dir: Path = Field(default_factory=lambda: Path.home() / WORK_FOLDER_NAME)
    log_level: str = "INFO"


# env-переменная -> поле AppConfig
_ENV_FIELDS = {
    "FABRIKUML_HIGHLIGHT_DELAY_MS": "highlight_delay_ms",
    "FABRIKUML_HIGHLIGHT_WORKERS": "highlight_workers",
    "PLANTUML_JAR": "plantuml_jar",
    "FABRIKUML_RENDER_TIMEOUT": "render_timeout_s",
    "FABRIKUML_WORK_DIR": "work_dir",
    "FABRIKUML_LOG_LEVEL": "log_level",
}


def load_config(environ=None) -> AppConfig:
    """Собирает AppConfig из окружения; пустые значения игнорируются."""
    env = os.environ if environ is None else environ
    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = (env.get(env_name) or "").strip()
        if raw:
            values[field_name] = raw

    try:
        cfg = AppConfig(**values)
    except ValidationError as e:
        bad = []
        for err in e.errors():
            field_name = err["loc"][0] if err["loc"] else "?"
            env_name = next((k for k, v in _ENV_FIELDS.items() if v == field_name), field_name)
            bad.append(f"{env_name}: {err['msg']}")
        raise ConfigError("Invalid configuration: " + "; ".join(bad)) from e

    cfg.log_level = cfg.log_level.upper()
    if cfg.plantuml_jar is not None:
        cfg.plantuml_jar = cfg.plantuml_jar.expanduser()
    cfg.work_dir = cfg.work_dir.expanduser()
    return cfg
