"""Tests for scene-level primitive storage and nearest-hit queries.

Tests cover:
- Adding and clearing spheres
- Closest hit selection regardless of insertion order
- Interval bounds applied across the whole scene
- Equal-distance ties resolved in insertion order
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=0.001, t_max=1e300):
    """Run intersect_scene in a kernel and return (hit, t, material_id, normal)."""
    from pathtracer.core.ray import Ray, make_interval
    from pathtracer.core.vector import vec3
    from pathtracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    mat = ti.field(dtype=ti.i32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, lo: ti.f64, hi: ti.f64):
        rec = intersect_scene(Ray(origin=o, direction=d), make_interval(lo, hi))
        hit[None] = rec.hit
        t_val[None] = rec.t
        mat[None] = rec.material_id
        normal[None] = rec.normal

    test_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
    n = normal[None]
    return int(hit[None]), float(t_val[None]), int(mat[None]), (n[0], n[1], n[2])


class TestSceneStorage:
    """Tests for primitive storage."""

    def test_add_sphere(self):
        """Test adding a sphere returns sequential indices."""
        from pathtracer.scene.intersection import add_sphere, get_primitive_count, get_sphere_count

        assert add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0) == 0
        assert add_sphere((1.0, 0.0, -1.0), 0.5, material_id=1) == 1
        assert get_sphere_count() == 2
        assert get_primitive_count() == 2

    def test_clear_scene(self):
        """Test clearing removes all primitives."""
        from pathtracer.scene.intersection import (
            add_sphere,
            clear_scene,
            get_primitive_count,
            get_sphere_count,
        )

        add_sphere((0.0, 0.0, -1.0), 0.5)
        clear_scene()
        assert get_sphere_count() == 0
        assert get_primitive_count() == 0

    def test_capacity_overflow_raises(self):
        """Test exceeding the sphere table raises RuntimeError."""
        from pathtracer.scene.intersection import MAX_SPHERES, add_sphere, num_spheres

        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError):
            add_sphere((0.0, 0.0, 0.0), 1.0)


class TestSceneIntersection:
    """Tests for nearest-hit queries."""

    def test_empty_scene_misses(self):
        """Test an empty scene never reports a hit."""
        hit, _, mat, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 0
        assert mat == -1

    def test_hit_single_sphere(self):
        """Test a single sphere hit carries the sphere's material id."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=3)
        hit, t, mat, normal = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert abs(t - 4.0) < 1e-12
        assert mat == 3
        assert normal == (0.0, 0.0, 1.0)

    def test_closest_of_two_spheres(self):
        """Test the nearer sphere wins when added first."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=0)
        add_sphere((0.0, 0.0, -10.0), 1.0, material_id=1)
        hit, t, mat, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert abs(t - 2.0) < 1e-12
        assert mat == 0

    def test_closest_of_two_spheres_reversed_order(self):
        """Test the nearer sphere wins when added last."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, material_id=1)
        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=0)
        hit, t, mat, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert abs(t - 2.0) < 1e-12
        assert mat == 0

    def test_equal_distance_tie_keeps_first(self):
        """Test identical spheres resolve to the earlier primitive."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=5)
        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=6)
        _, _, mat, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert mat == 5

    def test_interval_limits_whole_scene(self):
        """Test a sphere beyond t_max is ignored."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, material_id=0)
        hit, _, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=5.0)

        assert hit == 0

    def test_self_hit_is_skipped_by_t_min(self):
        """Test a ray starting on a surface does not re-hit it at t ~ 0."""
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)
        # Start on the surface heading outward
        hit, _, _, _ = _intersect((0.0, 0.0, 1.0), (0.0, 0.0, 1.0))

        assert hit == 0
