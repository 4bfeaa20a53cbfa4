from __future__ import annotations

from pathlib import Path

import pytest

from aurders.generator import (
    PackageInfo,
    generate_pkgbuild,
    generate_srcinfo,
    render,
    save_output,
    save_pkgbuild,
    save_srcinfo,
)
from aurders.templates import TemplateStore
from aurders.utils import OutputExistsError, OutputWriteError, TemplateNotFoundError

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def info() -> PackageInfo:
    return PackageInfo(
        maintainer_name="Jane Doe",
        maintainer_email="jane@example.org",
        pkgname="foo",
        pkgver="1.0",
        pkgrel="2",
        pkgdesc="A foo tool",
        url="https://example.org/foo",
        license="MIT",
        arch="x86_64",
        depends="'glibc' 'zlib'",
        makedepends="'make'",
        sha256sums="SKIP",
    )


def test_render_substitutes_known_fields() -> None:
    rendered = render("pkgname={pkgname}\nver={pkgver}", {"pkgname": "foo", "pkgver": "1.0"})

    assert rendered == "pkgname=foo\nver=1.0"


def test_render_replaces_every_occurrence() -> None:
    rendered = render("{pkgname}-{pkgver}/{pkgname}", {"pkgname": "foo", "pkgver": "2"})

    assert rendered == "foo-2/foo"


def test_render_leaves_unknown_placeholders() -> None:
    rendered = render("{pkgname} {epoch} {}", {"pkgname": "foo"})

    assert rendered == "foo {epoch} {}"


def test_render_ignores_fields_missing_from_template() -> None:
    template = "pkgname={pkgname}"

    assert render(template, {"pkgname": "foo"}) == render(template, {"pkgname": "foo", "url": "x", "arch": "any"})


def test_render_does_not_substitute_inside_values() -> None:
    rendered = render("{pkgdesc} {pkgver}", {"pkgdesc": "uses {pkgver}", "pkgver": "3"})

    assert rendered == "uses {pkgver} 3"


def test_render_with_empty_mapping_returns_template() -> None:
    assert render("{pkgname}", {}) == "{pkgname}"


def test_as_fields_keeps_declaration_order(info: PackageInfo) -> None:
    assert list(info.as_fields()) == [
        "maintainer_name",
        "maintainer_email",
        "pkgname",
        "pkgver",
        "pkgrel",
        "pkgdesc",
        "url",
        "license",
        "arch",
        "depends",
        "makedepends",
        "sha256sums",
    ]


def test_generate_pkgbuild_from_bundled_template(info: PackageInfo) -> None:
    pkgbuild = generate_pkgbuild(info, TemplateStore(ROOT / "templates"))

    assert "# Maintainer: Jane Doe <jane@example.org>" in pkgbuild
    assert "pkgname=foo\n" in pkgbuild
    assert "arch=('x86_64')" in pkgbuild
    assert "depends=('glibc' 'zlib')" in pkgbuild
    assert "sha256sums=('SKIP')" in pkgbuild
    for name in info.as_fields():
        assert "{" + name + "}" not in pkgbuild


def test_generate_srcinfo_uses_literals(info: PackageInfo, tmp_path: Path) -> None:
    (tmp_path / "SRCINFO").write_text(
        "pkgbase = {pkgbase}\nsource = {source}\npkgname = {pkgname}\nsha256sums = {sha256sums}\n",
        encoding="utf-8",
    )

    srcinfo = generate_srcinfo(info, TemplateStore(tmp_path))

    assert srcinfo == "pkgbase = foo\nsource = SOURCE\npkgname = pkgname\nsha256sums = SKIP\n"


def test_generate_srcinfo_from_bundled_template(info: PackageInfo) -> None:
    srcinfo = generate_srcinfo(info, TemplateStore(ROOT / "templates"))

    assert srcinfo.startswith("pkgbase = foo\n")
    assert "\tpkgver = 1.0\n" in srcinfo
    assert "\tlicense = MIT\n" in srcinfo
    assert "{" not in srcinfo


def test_generate_pkgbuild_missing_template(info: PackageInfo, tmp_path: Path) -> None:
    with pytest.raises(TemplateNotFoundError):
        generate_pkgbuild(info, TemplateStore(tmp_path))


def test_save_output_refuses_to_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "PKGBUILD"

    save_output(target, "text")
    with pytest.raises(OutputExistsError):
        save_output(target, "other")

    assert target.read_text(encoding="utf-8") == "text"


def test_save_output_reports_write_errors(tmp_path: Path) -> None:
    with pytest.raises(OutputWriteError):
        save_output(tmp_path / "missing" / "PKGBUILD", "text")


def test_save_helpers_use_expected_names(tmp_path: Path) -> None:
    assert save_pkgbuild("a", tmp_path) == tmp_path / "PKGBUILD"
    assert save_srcinfo("b", tmp_path) == tmp_path / ".SRCINFO"
    assert (tmp_path / ".SRCINFO").read_text(encoding="utf-8") == "b"


def test_save_srcinfo_is_independent_of_existing_pkgbuild(tmp_path: Path) -> None:
    (tmp_path / "PKGBUILD").write_text("maintainer authored", encoding="utf-8")

    with pytest.raises(OutputExistsError):
        save_pkgbuild("generated", tmp_path)
    save_srcinfo("generated", tmp_path)

    assert (tmp_path / "PKGBUILD").read_text(encoding="utf-8") == "maintainer authored"
    assert (tmp_path / ".SRCINFO").read_text(encoding="utf-8") == "generated"
