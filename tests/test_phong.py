"""Tests for Phong shading.

This module tests the Phong local illumination model including:
- Material validation
- Ambient, diffuse and specular terms in isolation
- The combined shade_phong result for a head-on configuration
- Non-negativity of the diffuse and specular terms
- Highlights from a light behind the surface (no N . L test on specular)
"""

import math

import pytest
import taichi as ti


class TestPhongMaterial:
    """Tests for the PhongMaterial dataclass."""

    def test_reference_defaults(self):
        """Test that defaults are the red reference material."""
        from src.whitted.materials.phong import DEFAULT_SHININESS, PhongMaterial

        material = PhongMaterial()
        assert material.ka == (1.0, 0.0, 0.0)
        assert material.kd == (1.0, 0.0, 0.0)
        assert material.ks == (1.0, 1.0, 1.0)
        assert material.shininess == DEFAULT_SHININESS == 32.0

    def test_negative_reflectance_raises(self):
        """Test that negative coefficients are rejected."""
        from src.whitted.materials.phong import PhongMaterial

        with pytest.raises(ValueError, match="kd"):
            PhongMaterial(kd=(0.5, -0.1, 0.0))

    def test_wrong_length_raises(self):
        """Test that coefficients must have three components."""
        from src.whitted.materials.phong import PhongMaterial

        with pytest.raises(ValueError, match="ka"):
            PhongMaterial(ka=(1.0, 0.0))

    def test_non_positive_shininess_raises(self):
        """Test that the Phong exponent must be positive."""
        from src.whitted.materials.phong import PhongMaterial

        with pytest.raises(ValueError, match="shininess"):
            PhongMaterial(shininess=0.0)


class TestPhongTerms:
    """Tests for the individual shading terms."""

    def test_ambient_is_componentwise_product(self):
        """Test I_a * k_a."""
        from src.whitted.materials.phong import eval_ambient, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = eval_ambient(vec3(0.2, 0.4, 0.5), vec3(1.0, 0.5, 0.0))

        test_kernel()
        a = result[None]
        assert (a[0], a[1], a[2]) == pytest.approx((0.2, 0.2, 0.0), abs=1e-12)

    def test_diffuse_head_on(self):
        """Test full diffuse response when the light is along the normal."""
        from src.whitted.materials.phong import eval_diffuse, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = eval_diffuse(
                vec3(0.8, 0.8, 0.8),
                vec3(1.0, 0.0, 0.0),
                vec3(0.0, 0.0, 1.0),
                vec3(0.0, 0.0, 1.0),
            )

        test_kernel()
        d = result[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.8, 0.0, 0.0), abs=1e-12)

    def test_diffuse_oblique(self):
        """Test Lambert's cosine law at 60 degrees."""
        from src.whitted.materials.phong import eval_diffuse, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = eval_diffuse(
                vec3(1.0, 1.0, 1.0),
                vec3(1.0, 1.0, 1.0),
                vec3(0.0, 0.0, 1.0),
                vec3(ti.sqrt(3.0) / 2.0, 0.0, 0.5),
            )

        test_kernel()
        assert result[None][0] == pytest.approx(0.5, abs=1e-12)

    def test_diffuse_light_behind_is_zero(self):
        """Test that diffuse is clamped to zero for a light behind the surface."""
        from src.whitted.materials.phong import eval_diffuse, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = eval_diffuse(
                vec3(1.0, 1.0, 1.0),
                vec3(1.0, 1.0, 1.0),
                vec3(0.0, 0.0, 1.0),
                vec3(0.0, 0.0, -1.0),
            )

        test_kernel()
        d = result[None]
        assert (d[0], d[1], d[2]) == (0.0, 0.0, 0.0)

    def test_specular_aligned_and_clamped(self):
        """Test specular at alignment and with a negative cosine."""
        from src.whitted.materials.phong import eval_specular, vec3

        aligned = ti.field(dtype=ti.math.vec3, shape=())
        opposed = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ks = vec3(1.0, 1.0, 1.0)
            light = vec3(0.5, 0.5, 0.5)
            r = vec3(0.0, 0.0, -1.0)
            aligned[None] = eval_specular(light, ks, r, vec3(0.0, 0.0, -1.0), 32.0)
            opposed[None] = eval_specular(light, ks, r, vec3(0.0, 0.0, 1.0), 32.0)

        test_kernel()
        assert aligned[None][0] == pytest.approx(0.5, abs=1e-12)
        o = opposed[None]
        assert (o[0], o[1], o[2]) == (0.0, 0.0, 0.0)

    def test_specular_falloff_uses_shininess(self):
        """Test that cos(alpha) is raised to the Phong exponent."""
        from src.whitted.materials.phong import eval_specular, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = eval_specular(
                vec3(1.0, 1.0, 1.0),
                vec3(1.0, 1.0, 1.0),
                vec3(0.0, 0.0, 1.0),
                vec3(0.0, 0.6, 0.8),
                4.0,
            )

        test_kernel()
        assert result[None][0] == pytest.approx(0.8**4, abs=1e-12)


class TestShadePhong:
    """Tests for the combined shading function."""

    def test_head_on_configuration(self):
        """Test light, eye and normal aligned: ambient + full diffuse + full specular."""
        from src.whitted.materials.phong import shade_phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = shade_phong(
                vec3(0.0, 0.0, -1.0),  # point
                vec3(0.0, 0.0, 1.0),  # normal
                vec3(0.0, 0.0, 0.0),  # eye
                vec3(1.0, 0.0, 0.0),  # ka
                vec3(1.0, 0.0, 0.0),  # kd
                vec3(1.0, 1.0, 1.0),  # ks
                32.0,
                vec3(0.2, 0.2, 0.2),  # ambient
                vec3(0.0, 0.0, 1.0),  # light position
                vec3(1.0, 1.0, 1.0),  # light color
            )

        test_kernel()
        c = result[None]
        assert (c[0], c[1], c[2]) == pytest.approx((2.2, 1.0, 1.0), abs=1e-12)

    def test_result_is_unclamped(self):
        """Test that a bright light produces channels above 1."""
        from src.whitted.materials.phong import shade_phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = shade_phong(
                vec3(0.0, 0.0, -1.0),
                vec3(0.0, 0.0, 1.0),
                vec3(0.0, 0.0, 0.0),
                vec3(1.0, 0.0, 0.0),
                vec3(1.0, 0.0, 0.0),
                vec3(0.0, 0.0, 0.0),
                32.0,
                vec3(0.0, 0.0, 0.0),
                vec3(0.0, 0.0, 1.0),
                vec3(5.0, 5.0, 5.0),
            )

        test_kernel()
        assert result[None][0] == pytest.approx(5.0, abs=1e-12)

    def test_light_behind_surface_keeps_highlight(self):
        """Test that specular has no N . L gate while diffuse does."""
        from src.whitted.materials.phong import shade_phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            # Light behind a surface facing +z: L = (0, 0, -1), R = (0, 0, 1),
            # and the eye at z = -2 looks along V = (0, 0, 1)
            result[None] = shade_phong(
                vec3(0.0, 0.0, -1.0),
                vec3(0.0, 0.0, 1.0),
                vec3(0.0, 0.0, -2.0),
                vec3(0.0, 0.0, 0.0),
                vec3(1.0, 0.0, 0.0),
                vec3(0.0, 1.0, 0.0),
                32.0,
                vec3(0.0, 0.0, 0.0),
                vec3(0.0, 0.0, -3.0),
                vec3(1.0, 1.0, 1.0),
            )

        test_kernel()
        c = result[None]
        assert c[0] == 0.0
        assert c[1] == pytest.approx(1.0, abs=1e-12)

    def test_terms_never_negative(self):
        """Test diffuse and specular stay non-negative over many directions."""
        from src.whitted.materials.phong import eval_diffuse, eval_specular, vec3

        n = 64
        diffuse = ti.field(dtype=ti.f64, shape=(n, n))
        specular = ti.field(dtype=ti.f64, shape=(n, n))

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for i, j in diffuse:
                theta = 2.0 * math.pi * i / n
                phi = math.pi * j / n
                d = vec3(ti.sin(phi) * ti.cos(theta), ti.sin(phi) * ti.sin(theta), ti.cos(phi))
                one = vec3(1.0, 1.0, 1.0)
                diffuse[i, j] = eval_diffuse(one, one, normal, d).min()
                specular[i, j] = eval_specular(one, one, d, normal, 32.0).min()

        test_kernel()
        assert diffuse.to_numpy().min() >= 0.0
        assert specular.to_numpy().min() >= 0.0

    def test_light_on_surface_is_not_finite(self):
        """Test that a light exactly at the shaded point yields NaN."""
        from src.whitted.materials.phong import shade_phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            p = vec3(0.0, 0.0, -1.0)
            result[None] = shade_phong(
                p,
                vec3(0.0, 0.0, 1.0),
                vec3(0.0, 0.0, 0.0),
                vec3(1.0, 0.0, 0.0),
                vec3(1.0, 0.0, 0.0),
                vec3(1.0, 1.0, 1.0),
                32.0,
                vec3(0.2, 0.2, 0.2),
                p,
                vec3(1.0, 1.0, 1.0),
            )

        test_kernel()
        assert math.isnan(result[None][0])

    def test_clamp_keeps_nan(self):
        """Test that the cosine clamp zeroes negatives but passes NaN through."""
        from src.whitted.materials.phong import clamp_non_negative

        values = ti.field(dtype=ti.f64, shape=3)
        result = ti.field(dtype=ti.f64, shape=3)
        values[0] = -0.5
        values[1] = 0.25
        values[2] = math.nan

        @ti.kernel
        def test_kernel():
            for i in range(3):
                result[i] = clamp_non_negative(values[i])

        test_kernel()
        assert result[0] == 0.0
        assert result[1] == 0.25
        assert math.isnan(result[2])
