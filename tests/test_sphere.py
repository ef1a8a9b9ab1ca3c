"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Interval bounds rejecting near and far roots
- Random rays: hits always lie inside the interval and on the surface
"""

import math

import taichi as ti


def _hit(origin, direction, center=(0.0, 0.0, 0.0), radius=1.0, t_min=0.001, t_max=1e300):
    """Run hit_sphere in a kernel and return the record as a dict."""
    from pathtracer.core.ray import Ray, make_interval
    from pathtracer.core.vector import vec3
    from pathtracer.geometry.sphere import make_sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f64, lo: ti.f64, hi: ti.f64):
        sphere = make_sphere(c, r, 7)
        record = hit_sphere(sphere, Ray(origin=o, direction=d), make_interval(lo, hi))
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face
        material_id[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": int(hit[None]),
        "t": float(t_val[None]),
        "point": tuple(float(x) for x in point[None]),
        "normal": tuple(float(x) for x in normal[None]),
        "front_face": int(front_face[None]),
        "material_id": int(material_id[None]),
    }


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-12
        assert rec["point"] == (0.0, 0.0, 1.0)
        assert rec["normal"] == (0.0, 0.0, 1.0)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 7

    def test_center_hit_distance(self):
        """Test a ray aimed at the center hits at distance minus radius."""
        d = 7.5
        r = 0.75
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), center=(0.0, 0.0, -d), radius=r)

        assert rec["hit"] == 1
        assert abs(rec["t"] - (d - r)) < 1e-12

    def test_hit_sphere_miss(self):
        """Test a ray passing beside the sphere."""
        rec = _hit((0.0, 2.0, 5.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 0
        assert rec["material_id"] == -1

    def test_hit_sphere_inside(self):
        """Test a ray starting inside hits the far side as a back face."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-12
        assert rec["front_face"] == 0
        # Normal is flipped to face the incoming ray
        assert rec["normal"] == (0.0, 0.0, 1.0)

    def test_hit_sphere_behind_ray(self):
        """Test a sphere entirely behind the origin is not hit."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0))

        assert rec["hit"] == 0

    def test_origin_past_far_side_misses(self):
        """Test a ray starting beyond the sphere and pointing away misses."""
        rec = _hit((0.0, 0.0, -1.5), (0.0, 0.0, -1.0), center=(0.0, 0.0, 0.0), radius=1.0)

        assert rec["hit"] == 0

    def test_near_root_outside_interval_uses_far_root(self):
        """Test the far root is returned when the near one is excluded."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_min=4.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-12
        assert rec["front_face"] == 0

    def test_t_max_excludes_hit(self):
        """Test hits beyond t_max are rejected."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_max=3.9)

        assert rec["hit"] == 0

    def test_hit_exactly_at_t_max_is_rejected(self):
        """Test the interval end is exclusive."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_min=0.001, t_max=4.0)

        # Near root 4.0 excluded, far root 6.0 beyond t_max
        assert rec["hit"] == 0

    def test_unnormalized_ray_direction(self):
        """Test t is measured in units of the direction's length."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0))

        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-12
        assert abs(rec["point"][2] - 1.0) < 1e-12

    def test_oblique_hit_normal_is_unit(self):
        """Test the normal at an oblique hit has unit length and faces the ray."""
        rec = _hit((3.0, 0.5, 4.0), (-3.0, -0.5, -4.0), radius=2.0)

        assert rec["hit"] == 1
        n = rec["normal"]
        assert abs(math.sqrt(n[0] ** 2 + n[1] ** 2 + n[2] ** 2) - 1.0) < 1e-12
        assert n[0] * -3.0 + n[1] * -0.5 + n[2] * -4.0 < 0.0


class TestRandomRays:
    """Property checks over many random rays."""

    def test_random_rays_respect_interval_and_surface(self):
        """Test every hit lies in the interval, on the surface, facing the ray."""
        from pathtracer.core.ray import Ray, make_interval
        from pathtracer.core.vector import dot, length, random_in_unit_sphere, vec3
        from pathtracer.geometry.sphere import hit_sphere, make_sphere

        n = 500
        hits = ti.field(dtype=ti.i32, shape=n)
        t_vals = ti.field(dtype=ti.f64, shape=n)
        radial = ti.field(dtype=ti.f64, shape=n)
        facing = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                origin = 4.0 * random_in_unit_sphere()
                direction = random_in_unit_sphere()
                sphere = make_sphere(vec3(0.2, -0.1, 0.3), 1.3, 0)
                rec = hit_sphere(
                    sphere, Ray(origin=origin, direction=direction), make_interval(0.001, 100.0)
                )
                hits[i] = rec.hit
                t_vals[i] = rec.t
                radial[i] = length(rec.point - sphere.center)
                facing[i] = dot(rec.normal, direction)

        test_kernel()
        num_hits = 0
        for i in range(n):
            if hits[i] == 1:
                num_hits += 1
                assert 0.001 < t_vals[i] < 100.0
                assert abs(radial[i] - 1.3) < 1e-9
                assert facing[i] <= 0.0
        assert num_hits > 0
