"""Tests for Material and MaterialLibrary sharing."""

import pytest

from polyprism._constants import FALLBACK_SHADER
from polyprism.errors import MissingAssetError
from polyprism.model.material import Material, MaterialLibrary


class TestMaterial:
    def test_defaults(self):
        material = Material(name="m")
        assert material.shader == FALLBACK_SHADER
        assert material.tint == (0, 0, 0, 255)
        assert material.users == 0
        assert material.shared is False

    def test_set_tint_normalises(self):
        material = Material(name="m")
        material.set_tint("blue")
        assert material.tint == (0, 0, 255, 255)

    def test_identity_equality(self):
        assert Material(name="m") != Material(name="m")


class TestMaterialLibrary:
    def test_acquire_returns_same_instance(self):
        library = MaterialLibrary({"brick": "Custom/Brick"})
        a = library.acquire("brick")
        b = library.acquire("brick")
        assert a is b
        assert a.shader == "Custom/Brick"
        assert a.users == 2
        assert a.shared is True

    def test_release(self):
        library = MaterialLibrary({"brick": "Custom/Brick"})
        material = library.acquire("brick")
        library.acquire("brick")
        library.release(material)
        assert material.users == 1
        assert material.shared is False

    def test_release_never_negative(self):
        library = MaterialLibrary()
        material = library.register("glass")
        library.release(material)
        assert material.users == 0

    def test_missing_raises(self):
        library = MaterialLibrary()
        with pytest.raises(MissingAssetError, match="no material named 'stone'"):
            library.acquire("stone")

    def test_missing_is_lookup_error(self):
        with pytest.raises(LookupError):
            MaterialLibrary().get("stone")

    def test_fallback_instances_unshared(self):
        library = MaterialLibrary(fallback_shader="Custom/Default")
        a = library.fallback()
        b = library.fallback()
        assert a is not b
        assert a.shader == "Custom/Default"
        assert a.users == 1
        assert a.shared is False

    def test_register_existing_returns_same(self):
        library = MaterialLibrary()
        first = library.register("glass", "Custom/Glass")
        assert library.register("glass", "Other") is first
        assert first.shader == "Custom/Glass"

    def test_register_without_shader_uses_fallback(self):
        library = MaterialLibrary(fallback_shader="Custom/Default")
        assert library.register("plain").shader == "Custom/Default"

    def test_register_empty_name_raises(self):
        with pytest.raises(ValueError, match="non-empty"):
            MaterialLibrary().register("")

    def test_container_protocol(self):
        library = MaterialLibrary({"b": "B", "a": "A"})
        assert "a" in library
        assert "c" not in library
        assert len(library) == 2
        assert library.names() == ["a", "b"]
