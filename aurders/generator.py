#!/usr/bin/env python3
"""PKGBUILD and .SRCINFO generation from templates."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping, Optional

from .templates import BUILD_DESCRIPTOR, SOURCE_INFO, TemplateStore
from .utils import OutputExistsError, OutputWriteError

PKGBUILD_FILENAME = "PKGBUILD"
SRCINFO_FILENAME = ".SRCINFO"

# .SRCINFO placeholders that are not taken from PackageInfo
SRCINFO_LITERALS = {
    "source": "SOURCE",
    "pkgname": "pkgname",
}


@dataclass(frozen=True)
class PackageInfo:
    """Metadata collected from the maintainer for one package."""

    maintainer_name: str
    maintainer_email: str
    pkgname: str
    pkgver: str
    pkgrel: str
    pkgdesc: str
    url: str
    license: str
    arch: str
    depends: str
    makedepends: str
    sha256sums: str

    def as_fields(self) -> dict[str, str]:
        """Return placeholder name to value, in declaration order."""
        return asdict(self)


def render(template: str, fields: Mapping[str, str]) -> str:
    """Replace every ``{name}`` in ``template`` with ``fields[name]``.

    All placeholders are replaced in one scan of the template, so a value
    that itself contains "{other}" is inserted verbatim. Placeholders without
    a field stay as they are.
    """
    if not fields:
        return template

    pattern = re.compile("|".join(re.escape("{" + name + "}") for name in fields))
    return pattern.sub(lambda match: fields[match.group(0)[1:-1]], template)


def pkgbuild_fields(info: PackageInfo) -> dict[str, str]:
    return info.as_fields()


def srcinfo_fields(info: PackageInfo) -> dict[str, str]:
    fields = {
        "pkgbase": info.pkgname,
        "pkgdesc": info.pkgdesc,
        "pkgver": info.pkgver,
        "pkgrel": info.pkgrel,
        "url": info.url,
        "arch": info.arch,
        "license": info.license,
        "depends": info.depends,
        "makedepends": info.makedepends,
        "sha256sums": info.sha256sums,
    }
    fields.update(SRCINFO_LITERALS)
    return fields


def generate_pkgbuild(
    info: PackageInfo,
    store: TemplateStore,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Render the PKGBUILD template. TemplateNotFoundError propagates."""
    logger = logger or logging.getLogger("aurders.generator")
    template = store.get_template(BUILD_DESCRIPTOR)
    logger.info("Got PKGBUILD template")
    return render(template, pkgbuild_fields(info))


def generate_srcinfo(
    info: PackageInfo,
    store: TemplateStore,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Render the .SRCINFO template. TemplateNotFoundError propagates."""
    logger = logger or logging.getLogger("aurders.generator")
    template = store.get_template(SOURCE_INFO)
    logger.info("Got SRCINFO template")
    return render(template, srcinfo_fields(info))


def save_output(path: Path, text: str, logger: Optional[logging.Logger] = None) -> Path:
    """Write ``text`` to a new file at ``path``.

    The file is opened in exclusive-create mode, so an existing file is never
    truncated or rewritten; that case raises OutputExistsError.
    """
    logger = logger or logging.getLogger("aurders.generator")
    try:
        with path.open("x", encoding="utf-8") as output:
            output.write(text)
    except FileExistsError as exc:
        raise OutputExistsError(f"{path} already exists, not overwriting it") from exc
    except OSError as exc:
        raise OutputWriteError(f"Failed to write {path}: {exc}") from exc

    logger.info("Generated %s successfully.", path.name)
    return path


def save_pkgbuild(text: str, directory: Path, logger: Optional[logging.Logger] = None) -> Path:
    return save_output(directory / PKGBUILD_FILENAME, text, logger)


def save_srcinfo(text: str, directory: Path, logger: Optional[logging.Logger] = None) -> Path:
    return save_output(directory / SRCINFO_FILENAME, text, logger)
