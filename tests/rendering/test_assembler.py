"""Tests for the PHP artifact assembler."""

from __future__ import annotations

import pytest

from wp_autoload.merger import GlobalClassMap
from wp_autoload.models import AutoloadSet, ClassMapEntry, PackageAutoloadDeclaration
from wp_autoload.rendering import ArtifactAssembler, AssemblyContext, FileInclude

BASE = "/srv/app"
VENDOR = "/srv/app/vendor"


@pytest.fixture(scope="module")
def assembler() -> ArtifactAssembler:
    return ArtifactAssembler()


def _class_map(**paths: str) -> GlobalClassMap:
    entries = {name.replace("__", "\\"): path for name, path in paths.items()}
    return GlobalClassMap(
        {name: ClassMapEntry(name=name, path=path) for name, path in entries.items()}, []
    )


def _context(**overrides) -> AssemblyContext:
    values = dict(
        suffix="abc",
        base_path=BASE,
        vendor_path=VENDOR,
        target_dir="composer",
        class_map=_class_map(),
        autoloads=AutoloadSet(),
        main_package=PackageAutoloadDeclaration(name="acme/site", install_path=BASE),
    )
    values.update(overrides)
    return AssemblyContext(**values)


def test_bootstrap_requires_real_loader_relative_to_itself(assembler: ArtifactAssembler) -> None:
    artifacts = assembler.assemble(_context())

    assert artifacts["autoload_wordpress.php"] == (
        "<?php\n\n"
        "// autoload_wordpress.php @generated by wp-autoload\n\n"
        "require_once dirname(__FILE__) . '/composer' . '/autoload_real_wordpress.php';\n\n"
        "return ComposerAutoloaderInitabc::getLoader();\n"
    )


def test_classmap_rows_are_relocatable(assembler: ArtifactAssembler) -> None:
    class_map = _class_map(
        Acme__Foo="/srv/app/vendor/acme/x/src/Foo.php",
        Site="/srv/app/src/Site.php",
    )

    artifacts = assembler.assemble(_context(class_map=class_map))

    assert artifacts["composer/autoload_classmap_wordpress.php"] == (
        "<?php\n\n"
        "// autoload_classmap_wordpress.php @generated by wp-autoload\n\n"
        "$vendorDir = dirname(dirname(__FILE__));\n"
        "$baseDir = dirname($vendorDir);\n\n"
        "return array(\n"
        "    'Acme\\\\Foo' => $vendorDir . '/acme/x/src/Foo.php',\n"
        "    'Site' => $baseDir . '/src/Site.php',\n"
        ");\n"
    )


def test_empty_tables_are_still_written(assembler: ArtifactAssembler) -> None:
    artifacts = assembler.assemble(_context())

    assert artifacts["composer/autoload_classmap_wordpress.php"].endswith("return array(\n);\n")
    assert artifacts["composer/autoload_psr4_wordpress.php"].endswith("return array(\n);\n")
    assert "composer/autoload_namespaces_wordpress.php" in artifacts
    assert "composer/ClassLoaderWordPress.php" in artifacts


def test_namespace_tables_list_deeper_prefixes_first(assembler: ArtifactAssembler) -> None:
    autoloads = AutoloadSet(
        psr0={"Acme_": ["/srv/app/vendor/acme/legacy/lib"]},
        psr4={
            "Acme\\": ["/srv/app/src", "/srv/app/vendor/acme/lib/src"],
            "Acme\\Blog\\": ["/srv/app/vendor/acme/blog/src"],
        },
    )

    artifacts = assembler.assemble(_context(autoloads=autoloads))

    psr4 = artifacts["composer/autoload_psr4_wordpress.php"]
    assert psr4.startswith("<?php\n\n// autoload_psr4_wordpress.php @generated by wp-autoload\n")
    assert psr4.endswith(
        "return array(\n"
        "    'Acme\\\\Blog\\\\' => array($vendorDir . '/acme/blog/src'),\n"
        "    'Acme\\\\' => array($baseDir . '/src', $vendorDir . '/acme/lib/src'),\n"
        ");\n"
    )
    namespaces = artifacts["composer/autoload_namespaces_wordpress.php"]
    assert "// autoload_namespaces_wordpress.php @generated by wp-autoload" in namespaces
    assert "    'Acme_' => array($vendorDir . '/acme/legacy/lib'),\n" in namespaces


def test_include_paths_file_only_when_paths_exist(assembler: ArtifactAssembler) -> None:
    without = assembler.assemble(_context())
    assert "include_paths_wordpress.php" not in without
    assert "set_include_path" not in without["composer/autoload_real_wordpress.php"]

    with_paths = assembler.assemble(
        _context(autoloads=AutoloadSet(include_paths=["/srv/app/vendor/pear/log"]))
    )
    assert with_paths["include_paths_wordpress.php"].endswith(
        "return array(\n\t$vendorDir . '/pear/log',\n);\n"
    )
    assert (
        "$vendorDir = dirname(__FILE__);\n$baseDir = dirname($vendorDir);\n"
        in with_paths["include_paths_wordpress.php"]
    )
    real = with_paths["composer/autoload_real_wordpress.php"]
    assert "$includePaths = require $vendorDir.'/include_paths_wordpress.php';" in real
    assert "set_include_path(implode(PATH_SEPARATOR, $includePaths));" in real


def test_real_loader_reflects_options(assembler: ArtifactAssembler) -> None:
    context = _context(
        class_map=_class_map(Foo="/srv/app/src/Foo.php"),
        classmap_authoritative=True,
        use_global_include_path=True,
        prepend_autoloader=False,
    )

    real = assembler.assemble(context)["composer/autoload_real_wordpress.php"]

    assert "class ComposerAutoloaderInitabc {" in real
    assert "\t\t$vendorDir = dirname(dirname(__FILE__));\n" in real
    assert "\t\t$baseDir   = dirname($vendorDir);\n" in real
    assert "$classMap = require $dir.'/autoload_classmap_wordpress.php';" in real
    assert "$loader->setClassMapAuthoritative(true);" in real
    assert "$loader->setUseIncludePath(true);" in real
    assert "$loader->register(false);" in real
    assert "'autoload'" not in real


def test_real_loader_skips_classmap_block_for_empty_map(assembler: ArtifactAssembler) -> None:
    real = assembler.assemble(_context())["composer/autoload_real_wordpress.php"]

    assert "addClassMap" not in real
    assert "setClassMapAuthoritative" not in real
    assert "$loader->register(true);" in real


def test_unsupported_files_are_commented_out(assembler: ArtifactAssembler) -> None:
    files = [
        FileInclude("/srv/app/vendor/acme/x/functions.php"),
        FileInclude("/srv/app/inc/modern.php", supported=False),
    ]

    real = assembler.assemble(_context(files=files))["composer/autoload_real_wordpress.php"]

    assert "\t\trequire $vendorDir . '/acme/x/functions.php';\n" in real
    assert (
        "//\t\trequire $baseDir . '/inc/modern.php'; // disabled because of PHP 5.3+ syntax\n" in real
    )
    assert real.index("register(true)") < real.index("functions.php")


def test_class_root_replaces_parent_of_vendor_dir(assembler: ArtifactAssembler) -> None:
    artifacts = assembler.assemble(_context(class_root="ABSPATH"))

    assert "$baseDir = ABSPATH;\n" in artifacts["composer/autoload_classmap_wordpress.php"]
    assert "\t\t$baseDir   = ABSPATH;\n" in artifacts["composer/autoload_real_wordpress.php"]


def test_target_dir_shim_for_main_package_with_psr0(assembler: ArtifactAssembler) -> None:
    main = PackageAutoloadDeclaration(
        name="acme/site",
        install_path=BASE,
        target_dir="Acme/Site",
        psr0={"Acme_Site_": ("",)},
    )

    real = assembler.assemble(_context(main_package=main))["composer/autoload_real_wordpress.php"]

    assert "spl_autoload_register(array('ComposerAutoloaderInitabc', 'autoload'), true);" in real
    assert "$dir      = dirname(dirname(dirname(__FILE__))) . '/';" in real
    assert "$prefixes = array('Acme_Site_');" in real
    assert "array_slice($path, 2)" in real
    assert "WordPress_Composer_ClassLoader::resolveIncludePath($path)" in real


def test_custom_target_dir_moves_generated_tables(assembler: ArtifactAssembler) -> None:
    artifacts = assembler.assemble(_context(target_dir="generated"))

    assert "generated/autoload_real_wordpress.php" in artifacts
    assert "composer/autoload_real_wordpress.php" not in artifacts
    assert "dirname(__FILE__) . '/generated' . '/autoload_real_wordpress.php'" in (
        artifacts["autoload_wordpress.php"]
    )


def test_empty_target_dir_places_tables_beside_bootstrap(assembler: ArtifactAssembler) -> None:
    artifacts = assembler.assemble(_context(target_dir="/"))

    assert "autoload_real_wordpress.php" in artifacts
    assert "ClassLoaderWordPress.php" in artifacts
    assert not any(key.startswith("/") for key in artifacts.files)
    assert "$vendorDir = dirname(__FILE__);\n" in artifacts["autoload_classmap_wordpress.php"]


def test_include_paths_header_keeps_class_root(assembler: ArtifactAssembler) -> None:
    artifacts = assembler.assemble(
        _context(class_root="ABSPATH", autoloads=AutoloadSet(include_paths=["/srv/app/lib"]))
    )

    include_file = artifacts["include_paths_wordpress.php"]
    assert "$vendorDir = dirname(__FILE__);\n$baseDir = ABSPATH;\n" in include_file
    assert "\t$baseDir . '/lib',\n" in include_file


@pytest.mark.parametrize(("case_sensitive", "literal"), [(True, "true"), (False, "false")])
def test_class_loader_carries_case_flag(
    assembler: ArtifactAssembler, case_sensitive: bool, literal: str
) -> None:
    loader = assembler.render_class_loader(case_sensitive)

    assert f"private $caseSensitive = {literal};" in loader
    assert "class WordPress_Composer_ClassLoader" in loader
    assert "public static function getClassPath($class)" in loader
