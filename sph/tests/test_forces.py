"""Tests for density and force computation."""

import numpy as np
import pytest

from sph.core.kernels import SmoothingKernels, density_kernel
from sph.core.particles import ParticleArrays
from sph.core.spatial_grid import SpatialGrid
from sph.core.vector import Vector2
from sph.physics.density import compute_densities, compute_density, neighbors_of
from sph.physics.forces import ForceModel, PointerForce, PointerMode
from sph.scenarios.placement import random_placement

KERNELS = SmoothingKernels(20.0)


def make_pair(distance=5.0, velocities=None):
    positions = np.array([[100.0, 100.0], [100.0 + distance, 100.0]])
    return ParticleArrays.from_positions(positions, velocities=velocities, radius=3.0)


class TestDensity:

    def test_isolated_particle_has_zero_density(self):
        particles = ParticleArrays.from_positions(np.array([[10.0, 10.0], [150.0, 150.0]]))
        grid = SpatialGrid((200.0, 200.0), 20.0)
        grid.rebuild(particles.position_x, particles.position_y)
        compute_densities(particles, grid, KERNELS)
        assert particles.density.tolist() == [0.0, 0.0]

    def test_empty_candidates(self):
        particles = make_pair()
        assert compute_density(Vector2(0.0, 0.0), particles, np.array([], dtype=int), KERNELS) == 0.0

    def test_density_sums_mass_weighted_kernel(self):
        particles = make_pair(distance=5.0)
        particles.mass = 2.5
        density = compute_density(particles.position(0), particles, np.array([1]), KERNELS)
        assert density == pytest.approx(2.5 * density_kernel(5.0, 20.0))

    def test_far_candidates_ignored(self):
        particles = make_pair(distance=50.0)
        assert compute_density(particles.position(0), particles, np.array([1]), KERNELS) == 0.0

    def test_self_excluded_by_index(self):
        # Identical positions must still only exclude the queried index
        particles = ParticleArrays.from_positions(np.array([[50.0, 50.0], [50.0, 50.0]]))
        grid = SpatialGrid((100.0, 100.0), 20.0)
        grid.rebuild(particles.position_x, particles.position_y)
        assert neighbors_of(0, particles, grid, KERNELS).tolist() == [1]
        compute_densities(particles, grid, KERNELS)
        assert particles.density[0] == pytest.approx(density_kernel(0.0, 20.0))

    def test_whole_set_pass_matches_per_particle(self, rng):
        positions = random_placement(80, (120.0, 100.0), 3.0, rng)
        particles = ParticleArrays.from_positions(positions)
        particles.mass = 1.5
        grid = SpatialGrid((120.0, 100.0), 20.0)
        grid.rebuild(particles.position_x, particles.position_y)
        compute_densities(particles, grid, KERNELS)
        expected = [compute_density(particles.position(i), particles,
                                    neighbors_of(i, particles, grid, KERNELS), KERNELS)
                    for i in range(len(particles))]
        assert particles.density.sum() > 0.0
        np.testing.assert_allclose(particles.density, expected, rtol=1e-12)

    def test_kernel_radius_drives_density(self):
        particles = make_pair(distance=15.0)
        wide = compute_density(particles.position(0), particles, np.array([1]), SmoothingKernels(20.0))
        narrow = compute_density(particles.position(0), particles, np.array([1]), SmoothingKernels(10.0))
        assert wide > 0.0
        assert narrow == 0.0


class TestPressure:

    def test_linear_equation_of_state(self, still_config):
        model = ForceModel(still_config)
        assert model.density_to_pressure(20.0) == 0.0
        assert model.density_to_pressure(21.0) == pytest.approx(800.0)
        assert model.density_to_pressure(0.0) == pytest.approx(-16000.0)

    @pytest.mark.parametrize("density", [0.0, 3.5, 20.0, 75.0])
    def test_shared_pressure_self_consistent(self, still_config, density):
        model = ForceModel(still_config)
        assert model.shared_pressure(density, density) == pytest.approx(model.density_to_pressure(density))

    def test_shared_pressure_symmetric(self, still_config):
        model = ForceModel(still_config)
        assert model.shared_pressure(10.0, 30.0) == model.shared_pressure(30.0, 10.0)

    @pytest.mark.parametrize("densities", [(30.0, 25.0), (1.0, 2.0), (40.0, 5.0)])
    def test_pair_force_antisymmetric(self, still_config, densities):
        model = ForceModel(still_config)
        particles = ParticleArrays.from_positions(np.array([[40.0, 60.0], [47.0, 52.0]]))
        particles.density[:] = densities
        f_a = model.pressure_force(0, np.array([1]), particles)
        f_b = model.pressure_force(1, np.array([0]), particles)
        assert f_a.x == pytest.approx(-f_b.x)
        assert f_a.y == pytest.approx(-f_b.y)

    def test_over_dense_pair_repels(self, still_config):
        model = ForceModel(still_config)
        particles = make_pair(distance=5.0)
        particles.density[:] = 30.0
        force = model.pressure_force(0, np.array([1]), particles)
        # Particle 0 is left of particle 1
        assert force.x < 0.0
        assert force.y == pytest.approx(0.0)

    def test_under_dense_pair_attracts(self, still_config):
        model = ForceModel(still_config)
        particles = make_pair(distance=5.0)
        particles.density[:] = 5.0
        assert model.pressure_force(0, np.array([1]), particles).x > 0.0

    def test_coincident_particles_get_finite_force(self, still_config):
        model = ForceModel(still_config, np.random.default_rng(7))
        particles = ParticleArrays.from_positions(np.array([[50.0, 50.0], [50.0, 50.0]]))
        particles.density[:] = 30.0
        force = model.pressure_force(0, np.array([1]), particles)
        assert np.isfinite(force.x) and np.isfinite(force.y)
        assert force.magnitude() > 0.0

    def test_no_neighbors(self, still_config):
        model = ForceModel(still_config)
        particles = make_pair()
        assert model.pressure_force(0, np.array([], dtype=int), particles) == Vector2.zero()


class TestViscosity:

    def test_pulls_toward_neighbor_velocity(self, still_config):
        model = ForceModel(still_config)
        particles = make_pair(distance=5.0, velocities=np.array([[0.0, 0.0], [10.0, -4.0]]))
        force = model.viscosity_force(0, np.array([1]), particles)
        assert force.x > 0.0
        assert force.y < 0.0

    def test_equal_velocities_no_force(self, still_config):
        model = ForceModel(still_config)
        particles = make_pair(distance=5.0, velocities=np.array([[3.0, 3.0], [3.0, 3.0]]))
        assert model.viscosity_force(0, np.array([1]), particles) == Vector2.zero()


class TestExternalForces:

    def test_pointer_none(self, still_config):
        model = ForceModel(still_config)
        pointer = PointerForce(Vector2(10.0, 0.0), PointerMode.NONE, 100.0)
        assert model.pointer_force(Vector2(0.0, 0.0), pointer) == Vector2.zero()
        assert model.pointer_force(Vector2(0.0, 0.0), None) == Vector2.zero()

    def test_pointer_outside_radius(self, still_config):
        model = ForceModel(still_config)
        pointer = PointerForce(Vector2(10.0, 0.0), PointerMode.ATTRACT, 10.0)
        assert model.pointer_force(Vector2(0.0, 0.0), pointer) == Vector2.zero()

    @pytest.mark.parametrize("distance", [1.0, 50.0, 99.0])
    def test_pointer_flat_field(self, still_config, distance):
        model = ForceModel(still_config)
        attract = PointerForce(Vector2(distance, 0.0), PointerMode.ATTRACT, 100.0)
        repel = PointerForce(Vector2(distance, 0.0), PointerMode.REPEL, 100.0)
        pull = model.pointer_force(Vector2(0.0, 0.0), attract)
        push = model.pointer_force(Vector2(0.0, 0.0), repel)
        assert pull.x == pytest.approx(still_config.pointer_constant)
        assert push.x == pytest.approx(-still_config.pointer_constant)

    def test_gravity_points_down(self, still_config):
        model = ForceModel(still_config.with_overrides(gravity=150.0))
        assert model.gravity() == Vector2(0.0, 150.0)

    def test_drag(self, still_config):
        model = ForceModel(still_config.with_overrides(drag_coefficient=0.01))
        assert model.drag(Vector2.zero()) == Vector2.zero()
        drag = model.drag(Vector2(30.0, 40.0))
        # -c |v|² v̂ = -0.01 * 2500 * (0.6, 0.8)
        assert drag.x == pytest.approx(-15.0)
        assert drag.y == pytest.approx(-20.0)


class TestTotalAcceleration:

    def test_isolated_particle_feels_gravity_only(self, still_config):
        model = ForceModel(still_config.with_overrides(gravity=150.0))
        particles = make_pair(distance=100.0)
        acceleration = model.total_acceleration(0, np.array([], dtype=int), particles)
        assert acceleration == Vector2(0.0, 150.0)

    def test_pointer_scaled_by_guarded_density(self, still_config):
        model = ForceModel(still_config)
        particles = make_pair(distance=100.0)
        pointer = PointerForce(Vector2(110.0, 100.0), PointerMode.ATTRACT, 50.0)
        acceleration = model.total_acceleration(0, np.array([], dtype=int), particles, pointer)
        expected = still_config.pointer_constant / still_config.density_epsilon
        assert acceleration.x == pytest.approx(expected)

    def test_pointer_can_be_disabled(self, still_config):
        model = ForceModel(still_config.with_overrides(enable_pointer_force=False))
        particles = make_pair(distance=100.0)
        pointer = PointerForce(Vector2(110.0, 100.0), PointerMode.ATTRACT, 50.0)
        assert model.total_acceleration(0, np.array([], dtype=int), particles, pointer) == Vector2.zero()

    def test_viscosity_can_be_disabled(self, still_config):
        particles = make_pair(distance=5.0, velocities=np.array([[0.0, 0.0], [10.0, 0.0]]))
        particles.density[:] = still_config.density_floor
        enabled = ForceModel(still_config).total_acceleration(0, np.array([1]), particles)
        disabled = ForceModel(still_config.with_overrides(enable_viscosity=False)).total_acceleration(
            0, np.array([1]), particles)
        assert enabled.x > 0.0
        assert disabled == Vector2.zero()


class TestWholeSetAccelerations:

    @staticmethod
    def prepared(config, positions, velocities=None):
        particles = ParticleArrays.from_positions(positions, velocities=velocities)
        grid = SpatialGrid(config.area_size, config.smoothing_radius)
        grid.rebuild(particles.position_x, particles.position_y)
        compute_densities(particles, grid, SmoothingKernels(config.smoothing_radius))
        return particles, grid

    @pytest.mark.parametrize("mode", [PointerMode.NONE, PointerMode.ATTRACT, PointerMode.REPEL])
    def test_matches_total_acceleration(self, still_config, rng, mode):
        config = still_config.with_overrides(gravity=150.0, drag_coefficient=0.01)
        positions = random_placement(60, config.area_size, config.particle_radius, rng)
        velocities = rng.uniform(-20.0, 20.0, size=(60, 2))
        particles, grid = self.prepared(config, positions, velocities)
        model = ForceModel(config)
        pointer = PointerForce(Vector2(90.0, 110.0), mode, 60.0)

        accel_x, accel_y = model.accelerations(particles, grid, pointer)

        for i in range(len(particles)):
            expected = model.total_acceleration(i, neighbors_of(i, particles, grid, model.kernels),
                                                particles, pointer)
            assert accel_x[i] == pytest.approx(expected.x, rel=1e-7, abs=1e-6)
            assert accel_y[i] == pytest.approx(expected.y, rel=1e-7, abs=1e-6)

    def test_pointer_disabled(self, still_config):
        config = still_config.with_overrides(enable_pointer_force=False)
        particles, grid = self.prepared(config, np.array([[100.0, 100.0]]))
        pointer = PointerForce(Vector2(110.0, 100.0), PointerMode.ATTRACT, 50.0)
        accel_x, accel_y = ForceModel(config).accelerations(particles, grid, pointer)
        assert accel_x.tolist() == [0.0]
        assert accel_y.tolist() == [0.0]

    def test_coincident_pair_gets_random_push(self, still_config):
        config = still_config.with_overrides(enable_viscosity=False)
        particles, grid = self.prepared(config, np.array([[50.0, 50.0], [50.0, 50.0], [150.0, 150.0]]))
        model = ForceModel(config, np.random.default_rng(3))

        accel_x, accel_y = model.accelerations(particles, grid)

        assert np.all(np.isfinite(accel_x)) and np.all(np.isfinite(accel_y))
        assert np.hypot(accel_x[0], accel_y[0]) > 0.0
        assert np.hypot(accel_x[1], accel_y[1]) > 0.0
        assert accel_x[2] == 0.0 and accel_y[2] == 0.0

    def test_coincident_direction_is_reproducible(self, still_config):
        positions = np.array([[50.0, 50.0], [50.0, 50.0]])
        particles, grid = self.prepared(still_config, positions)
        first = ForceModel(still_config, np.random.default_rng(5)).accelerations(particles, grid)
        second = ForceModel(still_config, np.random.default_rng(5)).accelerations(particles, grid)
        np.testing.assert_array_equal(first[0], second[0])
        np.testing.assert_array_equal(first[1], second[1])


class TestRandomUnit:

    def test_unit_length(self, rng):
        for _ in range(20):
            assert Vector2.random_unit(rng).magnitude() == pytest.approx(1.0)

    def test_seeded(self):
        a = Vector2.random_unit(np.random.default_rng(11))
        b = Vector2.random_unit(np.random.default_rng(11))
        assert a == b
