"""
Demo notes used when no saved collection is available.
"""
from __future__ import annotations

from .note import NoteRecord
from .utils import timestamp

__all__ = [
    "seed_notes",
]

_PHYSICS = r"""# Physics 101

Welcome to your physics notebook. Start by adding some equations.

## Kinematics

The position of a particle is given by:

$$
x(t) = x_0 + v_0 t + \frac{1}{2} a t^2
$$
"""

_QUANTUM = r"""# Quantum Mechanics

The Schrödinger equation:

$$
i\hbar\frac{\partial}{\partial t} \Psi(\mathbf{r},t) = \hat{H} \Psi(\mathbf{r},t)
$$
"""

_MATH = """# Calculus

Let's talk about integrals."""


def seed_notes(now: int | None = None) -> tuple[NoteRecord, ...]:
    now = now if now is not None else timestamp()

    return (
        NoteRecord(
            id="1",
            parent_id=None,
            title="Physics 101",
            content=_PHYSICS,
            created_at=now,
            updated_at=now,
            is_expanded=True,
        ),
        NoteRecord(
            id="2",
            parent_id="1",
            title="Quantum Mechanics",
            content=_QUANTUM,
            created_at=now,
            updated_at=now,
            is_expanded=False,
        ),
        NoteRecord(
            id="3",
            parent_id=None,
            title="Math Notes",
            content=_MATH,
            created_at=now,
            updated_at=now,
            is_expanded=False,
        ),
    )
