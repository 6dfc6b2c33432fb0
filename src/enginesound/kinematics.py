"""
Kinematics Module
Slider-crank geometry that drives each chamber's volume.

Mathematical Basis
------------------
With crank radius r, rod length l and crank angle θ measured from TDC,
the rod's projection on the cylinder axis is

    p(θ)  = √(l² − (r sin θ)²)

and the crank-centre to piston-pin distance is

    x(θ)  = r cos θ + p(θ)                     x(0) = l + r,  x(π) = l − r

Travel away from TDC, y(θ) = (l + r) − x(θ), is evaluated without the
subtraction so it stays accurate near TDC:

    y(θ)  = r · 2 sin²(θ/2) + (r sin θ)² / (l + p(θ))

Its time derivative at constant ω:

    dy/dt = ω · r sin θ · (1 + r cos θ / p(θ))

p(θ) is real for every θ exactly when l > r.
"""

import math


class SliderCrank:
    """Crank and connecting rod converting rotation to piston travel.

    Attributes
    ----------
    r            : float  Crank throw  [m]
    l            : float  Connecting rod, pin to pin  [m]
    lambda_ratio : float  r / l
    """

    def __init__(self, crank_radius: float, connecting_rod_length: float) -> None:
        if not crank_radius > 0.0:
            raise ValueError(f"Crank radius must be > 0 m, got {crank_radius}")
        if not connecting_rod_length > crank_radius:
            raise ValueError(
                f"Rod length {connecting_rod_length} m must exceed the crank "
                f"radius {crank_radius} m for the crank to turn through 360°"
            )

        self.r = crank_radius
        self.l = connecting_rod_length
        self.lambda_ratio = crank_radius / connecting_rod_length

    @property
    def stroke(self) -> float:
        """Piston travel TDC to BDC  [m]."""
        return self.r + self.r

    def rod_projection(self, theta: float) -> float:
        """Axial length of the rod  p(θ)  [m].

        Raises
        ------
        ValueError
            If l² − (r sin θ)² < 0, i.e. the rod cannot reach the crank pin.
        """
        offset = self.r * math.sin(theta)
        radicand = self.l * self.l - offset * offset
        if radicand < 0.0:
            raise ValueError(
                f"Rod of {self.l} m cannot reach a crank pin {offset:.6f} m "
                f"off axis (l² − (r·sinθ)² = {radicand:.3e} m²)"
            )
        return math.sqrt(radicand)

    def piston_distance(self, theta: float) -> float:
        """Crank centre to piston pin  x(θ)  [m]."""
        return self.r * math.cos(theta) + self.rod_projection(theta)

    def displacement(self, theta: float) -> float:
        """Piston travel from TDC  y(θ) ∈ [0, stroke]  [m]."""
        p = self.rod_projection(theta)
        half_angle = math.sin(0.5 * theta)
        lateral = self.r * math.sin(theta)
        return 2.0 * self.r * half_angle * half_angle + lateral * lateral / (self.l + p)

    def velocity(self, theta: float, omega: float) -> float:
        """Piston speed away from TDC  dy/dt  [m/s] at crank speed ω [rad/s]."""
        p = self.rod_projection(theta)
        lever = 1.0 + self.r * math.cos(theta) / p
        return omega * self.r * math.sin(theta) * lever
