"""Unit tests for the Dielectric material module.

Tests cover:
- Refraction following Snell's law on the way in and out
- Total internal reflection
- Schlick reflectance values and the reflection probability
- Index 1 leaves rays undeviated
- Attenuation is always white
- Material registry operations and validation
"""

import math

import pytest
import taichi as ti


def _scatter_many(refraction_index, direction, outward_normal=(0.0, 1.0, 0.0), n_samples=1):
    """Scatter ``n_samples`` rays off a dielectric boundary at the origin."""
    from pathtracer.core.ray import Ray
    from pathtracer.core.vector import vec3
    from pathtracer.geometry.hittable import make_hit_record
    from pathtracer.materials.dielectric import scatter_dielectric

    dirs = ti.Vector.field(3, dtype=ti.f64, shape=n_samples)
    atts = ti.Vector.field(3, dtype=ti.f64, shape=n_samples)
    front = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(eta: ti.f64, d: vec3, n: vec3):
        rec = make_hit_record(1.0, vec3(0.0, 0.0, 0.0), n, d, 0)
        front[None] = rec.front_face
        for i in range(n_samples):
            scattered, attenuation = scatter_dielectric(
                eta, Ray(origin=-d, direction=d), rec
            )
            dirs[i] = scattered.direction
            atts[i] = attenuation

    test_kernel(refraction_index, vec3(*direction), vec3(*outward_normal))
    return dirs.to_numpy(), atts.to_numpy(), int(front[None])


class TestRefraction:
    """Tests for refraction through the boundary."""

    def test_refraction_normal_incidence(self):
        """Test a head-on ray continues straight through (when it refracts)."""
        dirs, _, front = _scatter_many(1.5, (0.0, -1.0, 0.0), n_samples=500)

        assert front == 1
        for d in dirs:
            # Either straight through or straight back
            assert abs(d[0]) < 1e-12 and abs(d[2]) < 1e-12
            assert abs(abs(d[1]) - 1.0) < 1e-12

    def test_refraction_snells_law_entering(self):
        """Test refracted rays entering glass obey n1 sin1 = n2 sin2."""
        dirs, _, _ = _scatter_many(1.5, (1.0, -1.0, 0.0), n_samples=500)

        refracted = [d for d in dirs if d[1] < 0.0]
        assert refracted
        for d in refracted:
            sin_t = d[0] / math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2)
            assert abs(1.5 * sin_t - math.sin(math.pi / 4.0)) < 1e-9

    def test_refraction_snells_law_leaving(self):
        """Test rays leaving glass bend away from the normal."""
        # Ray travels +y inside the glass and meets the outward normal +y
        angle = math.radians(20.0)
        direction = (math.sin(angle), math.cos(angle), 0.0)
        dirs, _, front = _scatter_many(1.5, direction, n_samples=500)

        assert front == 0
        refracted = [d for d in dirs if d[1] > 0.0]
        assert refracted
        for d in refracted:
            sin_t = d[0] / math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2)
            assert abs(sin_t - 1.5 * math.sin(angle)) < 1e-9


class TestTotalInternalReflection:
    """Tests for total internal reflection."""

    def test_tir_always_reflects(self):
        """Test rays beyond the critical angle always reflect back inside."""
        angle = math.radians(60.0)  # critical angle for 1.5 is ~41.8 degrees
        direction = (math.sin(angle), math.cos(angle), 0.0)
        dirs, _, _ = _scatter_many(1.5, direction, n_samples=500)

        for d in dirs:
            assert abs(d[0] - math.sin(angle)) < 1e-12
            assert abs(d[1] + math.cos(angle)) < 1e-12

    def test_cannot_refract_flag(self):
        """Test cannot_refract only triggers when ratio * sin > 1."""
        from pathtracer.materials.dielectric import cannot_refract

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = cannot_refract(1.5, ti.cos(1.0))  # sin ~ 0.84 -> 1.26
            result[1] = cannot_refract(1.5, ti.cos(0.5))  # sin ~ 0.48 -> 0.72
            result[2] = cannot_refract(1.0 / 1.5, 0.0)  # entering never TIRs

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0
        assert result[2] == 0


class TestFresnel:
    """Tests for Schlick reflectance."""

    def test_schlick_normal_incidence(self):
        """Test reflectance at normal incidence is r0."""
        from pathtracer.materials.dielectric import schlick_reflectance

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = schlick_reflectance(1.0, 1.5)
            result[1] = schlick_reflectance(1.0, 1.0 / 1.5)

        test_kernel()
        # r0 = ((1-1.5)/(1+1.5))^2 = 0.04, same for the reciprocal ratio
        assert abs(result[0] - 0.04) < 1e-12
        assert abs(result[1] - 0.04) < 1e-12

    def test_schlick_grazing_angle(self):
        """Test reflectance at grazing incidence is 1."""
        from pathtracer.materials.dielectric import schlick_reflectance

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-12

    def test_reflection_probability_matches_schlick(self):
        """Test the fraction of reflected rays approaches the Schlick value."""
        n_samples = 20000
        angle = math.radians(75.0)
        direction = (math.sin(angle), -math.cos(angle), 0.0)
        dirs, _, _ = _scatter_many(1.5, direction, n_samples=n_samples)

        reflected = sum(1 for d in dirs if d[1] > 0.0)
        cos_theta = math.cos(angle)
        r0 = 0.04
        expected = r0 + (1.0 - r0) * (1.0 - cos_theta) ** 5
        assert abs(reflected / n_samples - expected) < 0.02


class TestDielectricProperties:
    """General scattering properties."""

    def test_attenuation_is_white(self):
        """Test glass never tints or absorbs."""
        _, atts, _ = _scatter_many(1.5, (0.3, -1.0, 0.2), n_samples=200)

        assert (atts == 1.0).all()

    def test_index_one_is_collinear(self):
        """Test an index of exactly 1 never deviates the ray."""
        direction = (0.6, -0.7, 0.3)
        norm = math.sqrt(sum(c * c for c in direction))
        dirs, _, _ = _scatter_many(1.0, direction, n_samples=500)

        for d in dirs:
            for k in range(3):
                assert abs(d[k] - direction[k] / norm) < 1e-9


class TestDielectricRegistry:
    """Tests for the dielectric material table."""

    def test_add_and_get_material(self):
        """Test adding a material and reading it back in a kernel."""
        from pathtracer.materials.dielectric import add_dielectric_material, get_dielectric_index

        add_dielectric_material(1.33)
        idx = add_dielectric_material(2.4)
        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_index(mat_idx)

        test_kernel(idx)
        assert idx == 1
        assert result[None] == 2.4

    def test_default_index_is_glass(self):
        """Test the default refraction index is 1.5."""
        from pathtracer.materials.dielectric import add_dielectric_material, dielectric_indices

        idx = add_dielectric_material()
        assert dielectric_indices[idx] == 1.5

    @pytest.mark.parametrize("index", [0.0, -1.5])
    def test_non_positive_index_rejected(self, index):
        """Test non-positive indices raise ValueError."""
        from pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(index)

    def test_index_below_one_allowed(self):
        """Test indices in (0, 1) are valid (e.g. air bubbles in water)."""
        from pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        add_dielectric_material(0.75)
        assert get_dielectric_material_count() == 1
