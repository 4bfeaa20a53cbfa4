"""Runtime settings for aurders."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

TEMPLATE_URL = "https://github.com/miteshhc/aurders/releases/download/template/templates.tar.gz"


@dataclass(frozen=True)
class RuntimeSettings:
    templates_dir: Path
    output_dir: Path
    workdir: Path
    template_url: str = TEMPLATE_URL
    fetch_timeout: Optional[float] = None


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        timeout = float(value)
    except ValueError:
        return None
    return timeout if timeout > 0 else None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> RuntimeSettings:
    env = os.environ if environ is None else environ
    workdir = Path(env.get("AURDERS_WORKDIR", "."))
    return RuntimeSettings(
        templates_dir=Path(env.get("AURDERS_TEMPLATES_DIR", "templates")),
        output_dir=Path(env.get("AURDERS_OUTPUT_DIR", "aurders")),
        workdir=workdir,
        template_url=env.get("AURDERS_TEMPLATE_URL", TEMPLATE_URL),
        fetch_timeout=_parse_timeout(env.get("AURDERS_FETCH_TIMEOUT")),
    )
