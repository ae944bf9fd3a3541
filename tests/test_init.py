"""Tests for polyprism public API."""

import numpy as np
import pytest

import polyprism


class TestPublicAPI:
    def test_all_names_importable(self):
        for name in polyprism.__all__:
            assert hasattr(polyprism, name), f"{name} not importable from polyprism"

    def test_errors_share_base(self):
        for exc in (
            polyprism.InvalidRingError,
            polyprism.DegeneratePolygonError,
            polyprism.TriangulationError,
            polyprism.MissingAssetError,
        ):
            assert issubclass(exc, polyprism.PrismError)

    def test_end_to_end_config_to_mesh(self, config_path):
        registry = polyprism.load_config(config_path).build_registry()
        result = registry.create_many([
            polyprism.PrismRequest(
                "block",
                np.array([0, 0, 100, 0, 100, 100, 0, 100]),
                polyprism.PrismProperties(height=200, colour="red", material="brick"),
            ),
        ])
        assert result.ok
        prism = registry["block"]
        assert prism.mesh.n_vertices == 16
        assert prism.mesh.n_faces == 12
        assert prism.colour == (255, 0, 0, 255)
        assert prism.material.shader == "Custom/Brick"
        world = prism.world_vertices()
        assert world[:, 1].min() == pytest.approx(0.5)
        assert world[:, 1].max() == pytest.approx(2.5)
