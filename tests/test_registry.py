"""Tests for PrismRegistry: creation from raw buffers, batches, updates."""

import threading

import numpy as np
import pytest

from polyprism.conversion import CoordinateConverter
from polyprism.errors import DegeneratePolygonError, InvalidRingError
from polyprism.model.material import MaterialLibrary
from polyprism.model.properties import PrismProperties
from polyprism.model.transform import AffineTransform
from polyprism.registry import BatchResult, PrismRegistry, PrismRequest

# Unit square and a 2x2 square at precision 100, as flat grid buffers.
_SQUARE = np.array([0, 0, 100, 0, 100, 100, 0, 100])
_BIG_SQUARE = np.array([0, 0, 200, 0, 200, 200, 0, 200])
_COLLINEAR = np.array([0, 0, 100, 100, 200, 200])


@pytest.fixture
def registry():
    converter = CoordinateConverter(AffineTransform(precision=100))
    materials = MaterialLibrary({"brick": "Custom/Brick"})
    return PrismRegistry(converter, materials=materials, base_offset=0.25)


class TestCreate:
    def test_converts_points_and_height(self, registry):
        prism = registry.create("a", _SQUARE, PrismProperties(height=200))
        assert prism.height == pytest.approx(2.0)
        assert prism.area == pytest.approx(1.0)
        np.testing.assert_allclose(prism.centroid, [0.5, 0.5])

    def test_base_offset_applied(self, registry):
        prism = registry.create("a", _SQUARE)
        assert prism.transform.position[1] == 0.25

    def test_default_properties(self, registry):
        prism = registry.create("a", _SQUARE)
        assert prism.height == 0.0
        assert prism.colour == (0, 0, 0, 255)
        assert prism.visible is True

    def test_registered(self, registry):
        prism = registry.create("a", _SQUARE)
        assert "a" in registry
        assert registry["a"] is prism
        assert registry.get("a") is prism
        assert len(registry) == 1

    def test_pairs_accepted(self, registry):
        prism = registry.create("a", _SQUARE.reshape(-1, 2))
        assert prism.area == pytest.approx(1.0)

    def test_odd_buffer_raises(self, registry):
        with pytest.raises(InvalidRingError, match="even length"):
            registry.create("a", np.array([0, 0, 100]))
        assert "a" not in registry

    def test_degenerate_not_registered(self, registry):
        with pytest.raises(DegeneratePolygonError):
            registry.create("line", _COLLINEAR)
        assert "line" not in registry

    def test_replace_releases_previous(self, registry):
        props = PrismProperties(material="brick")
        registry.create("a", _SQUARE, props)
        registry.create("a", _BIG_SQUARE, props)
        assert len(registry) == 1
        assert registry["a"].area == pytest.approx(4.0)
        assert registry.materials.get("brick").users == 1

    def test_named_material_shared(self, registry):
        props = PrismProperties(material="brick")
        a = registry.create("a", _SQUARE, props)
        b = registry.create("b", _BIG_SQUARE, props)
        assert a.material is b.material
        assert a.material.users == 2
        assert a.material.shared


class TestCreateMany:
    def test_failures_collected(self, registry):
        result = registry.create_many([
            PrismRequest("a", _SQUARE),
            PrismRequest("line", _COLLINEAR),
            PrismRequest("b", _BIG_SQUARE),
        ])
        assert isinstance(result, BatchResult)
        assert not result.ok
        assert [e.name for e in result.created] == ["a", "b"]
        assert set(result.failed) == {"line"}
        assert isinstance(result.failed["line"], DegeneratePolygonError)
        assert registry.names() == ["a", "b"]

    def test_failure_logged(self, registry, caplog):
        registry.create_many([PrismRequest("line", _COLLINEAR)])
        assert "line" in caplog.text

    def test_negative_height_fails_item(self, registry):
        result = registry.create_many([
            PrismRequest("a", _SQUARE, PrismProperties(height=-100)),
        ])
        assert isinstance(result.failed["a"], ValueError)

    def test_all_ok(self, registry):
        result = registry.create_many([PrismRequest("a", _SQUARE)])
        assert result.ok
        assert result.failed == {}


class TestUpdate:
    def test_rebuilds_ring(self, registry):
        registry.create("a", _SQUARE, PrismProperties(height=300))
        prism = registry.update("a", _BIG_SQUARE)
        assert prism is registry["a"]
        assert prism.area == pytest.approx(4.0)
        np.testing.assert_allclose(prism.transform.position, [1.0, 0.25, 1.0])
        assert prism.height == pytest.approx(3.0)

    def test_unknown_name_raises(self, registry):
        with pytest.raises(KeyError):
            registry.update("missing", _SQUARE)

    def test_failed_update_keeps_state(self, registry):
        prism = registry.create("a", _SQUARE)
        mesh = prism.mesh
        with pytest.raises(DegeneratePolygonError):
            registry.update("a", _COLLINEAR)
        assert registry["a"].mesh is mesh
        assert registry["a"].area == pytest.approx(1.0)

    def test_removed_during_conversion_not_updated(self, registry, monkeypatch):
        prism = registry.create("a", _SQUARE, PrismProperties(material="brick"))
        convert = registry.converter.convert_batch

        def convert_then_remove(points):
            registry.remove("a")
            return convert(points)

        monkeypatch.setattr(registry.converter, "convert_batch", convert_then_remove)
        with pytest.raises(KeyError):
            registry.update("a", _BIG_SQUARE)
        assert prism.area == pytest.approx(1.0)
        assert "a" not in registry

    def test_hidden_prism_does_not_blacken_shared_material(self, registry):
        shown = registry.create(
            "a", _SQUARE, PrismProperties(colour="red", material="brick"),
        )
        registry.create(
            "b", _BIG_SQUARE, PrismProperties(material="brick", visible=False),
        )
        assert shown.material.tint == (255, 0, 0, 255)
        assert registry.materials.get("brick").users == 1

    def test_update_many_mapping(self, registry):
        registry.create("a", _SQUARE)
        registry.create("b", _SQUARE)
        result = registry.update_many({"a": _BIG_SQUARE, "b": _COLLINEAR, "c": _SQUARE})
        assert [e.name for e in result.created] == ["a"]
        assert set(result.failed) == {"b", "c"}
        assert isinstance(result.failed["c"], KeyError)
        assert registry["b"].area == pytest.approx(1.0)

    def test_update_many_pairs(self, registry):
        registry.create("a", _SQUARE)
        result = registry.update_many([("a", _BIG_SQUARE)])
        assert result.ok
        assert registry["a"].area == pytest.approx(4.0)


class TestRemoveAndReset:
    def test_remove(self, registry):
        registry.create("a", _SQUARE, PrismProperties(material="brick"))
        removed = registry.remove("a")
        assert removed.name == "a"
        assert "a" not in registry
        assert registry.materials.get("brick").users == 0

    def test_remove_unknown_raises(self, registry):
        with pytest.raises(KeyError):
            registry.remove("missing")

    def test_reset(self, registry):
        registry.create("a", _SQUARE, PrismProperties(material="brick"))
        registry.create("b", _BIG_SQUARE, PrismProperties(material="brick"))
        registry.reset()
        assert len(registry) == 0
        assert registry.names() == []
        assert registry.materials.get("brick").users == 0

    def test_get_missing_is_none(self, registry):
        assert registry.get("missing") is None


class TestIsolation:
    def test_registries_independent(self):
        a = PrismRegistry(CoordinateConverter(AffineTransform(precision=100)))
        b = PrismRegistry(CoordinateConverter(AffineTransform(precision=1)))
        a.create("x", _SQUARE)
        assert "x" not in b
        b.create("x", _SQUARE)
        assert a["x"].area == pytest.approx(1.0)
        assert b["x"].area == pytest.approx(10_000.0)

    def test_iteration_is_snapshot(self, registry):
        registry.create("a", _SQUARE)
        seen = []
        for prism in registry:
            seen.append(prism.name)
            registry.create("b", _SQUARE)
        assert seen == ["a"]

    def test_concurrent_readers(self, registry):
        for i in range(5):
            registry.create(f"p{i}", _SQUARE + 100 * i)
        errors = []

        def read():
            try:
                for _ in range(200):
                    for prism in registry:
                        assert prism.area == pytest.approx(1.0)
            except Exception as exc:  # pragma: no cover - reported below
                errors.append(exc)

        readers = [threading.Thread(target=read) for _ in range(4)]
        for t in readers:
            t.start()
        for i in range(5, 25):
            registry.create(f"p{i}", _SQUARE + 100 * i)
        for t in readers:
            t.join()
        assert errors == []
        assert len(registry) == 25
