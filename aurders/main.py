#!/usr/bin/env python3
"""Entry point for aurders."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .archive import create_tarball, get_sha256
from .generator import (
    PackageInfo,
    generate_pkgbuild,
    generate_srcinfo,
    save_pkgbuild,
    save_srcinfo,
)
from .prompts import (
    confirm_continue,
    get_source,
    input_bool,
    input_string,
    input_string_strict,
    select_arch,
)
from .settings import RuntimeSettings, load_settings
from .templates import TemplateStore, get_templates
from .utils import (
    AbortRequested,
    AurdersError,
    OutputExistsError,
    OutputWriteError,
    create_directory,
    get_arch,
    setup_logging,
)


def _under(workdir: Path, path: Path) -> Path:
    return path if path.is_absolute() else workdir / path


def resolve_settings(settings: RuntimeSettings, args: argparse.Namespace) -> RuntimeSettings:
    """Apply command-line overrides and anchor relative paths at the workdir."""
    if args.workdir:
        settings = replace(settings, workdir=Path(args.workdir).expanduser())
    if args.templates_dir:
        settings = replace(settings, templates_dir=Path(args.templates_dir).expanduser())
    if args.output_dir:
        settings = replace(settings, output_dir=Path(args.output_dir).expanduser())

    return replace(
        settings,
        templates_dir=_under(settings.workdir, settings.templates_dir),
        output_dir=_under(settings.workdir, settings.output_dir),
    )


def default_arch(logger: logging.Logger) -> str:
    arch = get_arch(logger=logger)
    if arch is not None:
        return arch
    confirm_continue()
    return "any"


def resolve_checksum(settings: RuntimeSettings, logger: logging.Logger) -> str:
    """Work out the sha256sums value, building a source tarball if needed."""
    source = get_source()
    if source is not None:
        return get_sha256(_under(settings.workdir, Path(source).expanduser()), logger)

    source_dir = Path(input_string_strict("Enter the path of the source directory:")).expanduser()
    tarball = create_tarball(_under(settings.workdir, source_dir), settings.output_dir, logger)
    print(f"Created tarball: {tarball}")
    return get_sha256(tarball, logger)


def collect_package_info(settings: RuntimeSettings, logger: logging.Logger) -> PackageInfo:
    """Prompt the maintainer for every PackageInfo field."""
    maintainer_name = input_string_strict("Enter the name of maintainer:")
    maintainer_email = input_string_strict("Enter the email of maintainer:")
    pkgname = input_string_strict("Enter the name of package:")
    pkgver = input_string("Enter the version of package (default: 1.0.0):", "1.0.0")
    pkgrel = input_string("Enter the release number of package (default: 1):", "1")
    pkgdesc = input_string("Enter the description about package:")
    url = input_string("Enter the url of package:")
    license_name = input_string("Enter the license of package (default: GPL3):", "GPL3")
    arch = select_arch(default_arch(logger))
    depends = input_string("Enter the dependencies of package:")
    makedepends = input_string("Enter the make dependencies of package:")
    sha256sums = resolve_checksum(settings, logger)

    return PackageInfo(
        maintainer_name=maintainer_name,
        maintainer_email=maintainer_email,
        pkgname=pkgname,
        pkgver=pkgver,
        pkgrel=pkgrel,
        pkgdesc=pkgdesc,
        url=url,
        license=license_name,
        arch=arch,
        depends=depends,
        makedepends=makedepends,
        sha256sums=sha256sums,
    )


def write_outputs(info: PackageInfo, settings: RuntimeSettings, logger: logging.Logger) -> int:
    """Generate and save both files; returns how many were written.

    An output that already exists is reported and skipped.
    """
    store = TemplateStore(settings.templates_dir, logger)
    pkgbuild = generate_pkgbuild(info, store, logger)
    srcinfo = generate_srcinfo(info, store, logger)

    written = 0
    for save, text in ((save_pkgbuild, pkgbuild), (save_srcinfo, srcinfo)):
        try:
            path = save(text, settings.workdir, logger)
        except (OutputExistsError, OutputWriteError) as exc:
            logger.error("%s", exc)
            continue
        print(f"Generated: {path}")
        written += 1
    return written


def run_interactive(settings: RuntimeSettings, fetch_templates: bool, logger: logging.Logger) -> int:
    if fetch_templates or not settings.templates_dir.is_dir():
        if fetch_templates or input_bool("No templates found. Fetch them now?(y/N)"):
            get_templates(settings, logger=logger)

    TemplateStore(settings.templates_dir, logger).ensure_available()
    create_directory(settings.output_dir, logger)
    info = collect_package_info(settings, logger)
    write_outputs(info, settings, logger)
    return 0


def run(args: argparse.Namespace, settings: Optional[RuntimeSettings] = None) -> int:
    """Run one aurders session and map errors to an exit status."""
    logger = setup_logging("aurders", logging.DEBUG if args.verbose else logging.INFO)
    settings = resolve_settings(settings or load_settings(), args)

    try:
        if args.checksum:
            print(get_sha256(_under(settings.workdir, Path(args.checksum).expanduser()), logger))
            return 0

        if args.tarball:
            create_directory(settings.output_dir, logger)
            source = _under(settings.workdir, Path(args.tarball).expanduser())
            print(create_tarball(source, settings.output_dir, logger))
            return 0

        if args.fetch_templates_only:
            get_templates(settings, logger=logger)
            return 0

        return run_interactive(settings, args.fetch_templates, logger)

    except AbortRequested as exc:
        logger.error("%s. Exiting...", exc)
        return 1
    except AurdersError as exc:
        logger.error("Operation failed: %s. Exiting...", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted. Exiting...")
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build command-line parser."""
    parser = argparse.ArgumentParser(
        prog="aurders",
        description="Generate PKGBUILD and .SRCINFO files for Arch Linux packages.",
    )
    parser.add_argument(
        "--fetch-templates",
        action="store_true",
        help="Download the template bundle before generating files",
    )
    parser.add_argument(
        "--fetch-templates-only",
        action="store_true",
        help="Download the template bundle and exit",
    )
    parser.add_argument("--templates-dir", help="Directory containing PKGBUILD and SRCINFO templates")
    parser.add_argument("--output-dir", help="Directory where source tarballs are written")
    parser.add_argument("--workdir", help="Directory where PKGBUILD and .SRCINFO are written")
    parser.add_argument("--checksum", metavar="FILE", help="Print the sha256 of FILE and exit")
    parser.add_argument("--tarball", metavar="DIR", help="Create a tarball of DIR and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Program entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
