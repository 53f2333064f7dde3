"""Tests for the package identity index."""

from constants import LicenseSource
from tree.index import PackageIndex, PackageNode, build_node
from tree.manifest import read_manifest


def _node(package_id, path="/x", **kwargs):
    name, version = package_id.rsplit("@", 1)
    return PackageNode(
        id=package_id,
        name=name,
        version=version,
        path=path,
        sha256=None,
        license=None,
        license_source=LicenseSource.NONE,
        **kwargs,
    )


class TestPackageIndex:
    """Test insert-if-absent semantics and the name multimap."""

    def test_first_insert_wins(self):
        index = PackageIndex()
        assert index.insert_if_absent(_node("a@1.0.0", "/first"))
        assert not index.insert_if_absent(_node("a@1.0.0", "/second"))
        assert index.get("a@1.0.0").path == "/first"
        assert len(index) == 1

    def test_name_multimap_keeps_registration_order(self):
        index = PackageIndex()
        index.insert_if_absent(_node("a@2.0.0"))
        index.insert_if_absent(_node("b@1.0.0"))
        index.insert_if_absent(_node("a@1.0.0"))
        assert index.ids_for_name("a") == ["a@2.0.0", "a@1.0.0"]
        assert index.ids_for_name("missing") == []
        assert list(index.nodes()) == ["a@2.0.0", "b@1.0.0", "a@1.0.0"]

    def test_scoped_names(self):
        index = PackageIndex()
        index.insert_if_absent(_node("@types/node@18.0.0"))
        assert index.ids_for_name("@types/node") == ["@types/node@18.0.0"]

    def test_contains(self):
        index = PackageIndex()
        index.insert_if_absent(_node("a@1.0.0"))
        assert "a@1.0.0" in index
        assert "a@2.0.0" not in index


class TestRegisterOrGet:
    """Test registering installs from disk."""

    def test_registers_new_package(self, tmp_path, make_package):
        pkg = make_package(tmp_path / "pkg", "pkg", "1.0.0",
                           dependencies={"dep": "^1.0.0"},
                           optional={"opt": "^2.0.0"},
                           license="MIT")
        index = PackageIndex()
        assert index.register_or_get(str(pkg)) == "pkg@1.0.0"

        node = index.get("pkg@1.0.0")
        assert node.id == f"{node.name}@{node.version}"
        assert node.path == str(pkg)
        assert node.sha256 is not None and len(node.sha256) == 64
        assert node.license == "MIT"
        assert node.license_source is LicenseSource.MANIFEST
        assert node.declared_dependencies == ("dep", "opt")
        assert node.dependency_specs == {"dep": "^1.0.0", "opt": "^2.0.0"}

    def test_existing_identity_not_reprocessed(self, tmp_path, make_package):
        first = make_package(tmp_path / "one", "pkg", "1.0.0")
        second = make_package(tmp_path / "two", "pkg", "1.0.0", files={"LICENSE": "MIT"})
        index = PackageIndex()
        index.register_or_get(str(first))
        assert index.register_or_get(str(second)) == "pkg@1.0.0"
        assert index.get("pkg@1.0.0").path == str(first)
        assert index.ids_for_name("pkg") == ["pkg@1.0.0"]

    def test_nameless_package_skipped(self, tmp_path, make_package):
        pkg = make_package(tmp_path / "anon", version="1.0.0")
        index = PackageIndex()
        assert index.register_or_get(str(pkg)) is None
        assert len(index) == 0

    def test_missing_manifest_skipped(self, tmp_path):
        index = PackageIndex()
        assert index.register_or_get(str(tmp_path)) is None


class TestPackageNode:
    """Test node serialization."""

    def test_to_dict(self, tmp_path, make_package):
        pkg = make_package(tmp_path / "pkg", "pkg", files={"LICENSE": "MIT License"})
        node = build_node(str(pkg), read_manifest(str(pkg)))
        data = node.to_dict()
        assert data["id"] == "pkg@0.0.0"
        assert data["version"] == "0.0.0"
        assert data["license"] == "LICENSE"
        assert data["licenseSource"] == "file"
        assert data["licenseText"] == "MIT License"
        assert data["missingLicense"] is False
        assert data["declaredDependencies"] == []
        assert "dependency_specs" not in data

    def test_missing_license_flag(self):
        assert _node("a@1.0.0").to_dict()["missingLicense"] is True
