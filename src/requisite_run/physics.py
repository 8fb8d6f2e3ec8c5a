"""Box geometry and collision predicates for the runner.

The runner does not need rigid-body dynamics: every entity is an
axis-aligned box moved by hand each tick. Boxes are pymunk.BB values used as
plain min/max rectangles. The simulation works in canvas coordinates where
y grows downward, so a box's ``bottom`` field holds the *smaller* y (the
visual top edge) and its ``top`` field the visual bottom edge. The helpers
below hide that naming so the predicates read in screen terms.
"""

import pymunk


# Feet may sit this far below a surface top and still land on it
LANDING_SLACK = 10.0

# Band used when re-scanning for a surface under the feet after movement.
# Narrower than LANDING_SLACK; the two are kept distinct on purpose.
SUPPORT_SLACK = 5.0


def box(x: float, y: float, width: float, height: float) -> pymunk.BB:
    """Box from a top-left corner and size in canvas coordinates."""
    return pymunk.BB(x, y, x + width, y + height)


def top_edge(bb: pymunk.BB) -> float:
    """Visual top edge (smallest y)."""
    return bb.bottom


def bottom_edge(bb: pymunk.BB) -> float:
    """Visual bottom edge (largest y)."""
    return bb.top


def overlaps_x(a: pymunk.BB, b: pymunk.BB) -> bool:
    """Strict horizontal overlap."""
    return a.left < b.right and a.right > b.left


def overlaps(a: pymunk.BB, b: pymunk.BB) -> bool:
    """Strict axis-aligned overlap; touching edges do not count.

    pymunk's own BB.intersects treats shared edges as intersecting, which
    would let a runner standing flush against an obstacle register a hit.
    """
    return (
        overlaps_x(a, b)
        and top_edge(a) < bottom_edge(b)
        and bottom_edge(a) > top_edge(b)
    )


def is_landing(player: pymunk.BB, vy: float, surface: pymunk.BB) -> bool:
    """Whether the player comes to rest on top of ``surface`` this tick.

    The feet must be horizontally over the surface, no more than
    LANDING_SLACK below its top, and on a course that reaches the top with
    the current vertical velocity.
    """
    feet = bottom_edge(player)
    surface_top = top_edge(surface)
    return (
        overlaps_x(player, surface)
        and feet <= surface_top + LANDING_SLACK
        and feet + vy >= surface_top
    )


def is_falling_onto(player: pymunk.BB, vy: float, surface: pymunk.BB) -> bool:
    """Vertical half of the landing test, without the horizontal check.

    Blocking only applies when this is false, matching the rule that a
    runner coming down onto a surface is never shoved sideways by it.
    """
    feet = bottom_edge(player)
    surface_top = top_edge(surface)
    return feet <= surface_top + LANDING_SLACK and feet + vy >= surface_top


def is_blocking(player: pymunk.BB, vy: float, surface: pymunk.BB) -> bool:
    """Whether ``surface`` obstructs the player horizontally."""
    return overlaps(player, surface) and not is_falling_onto(player, vy, surface)


def is_supported_by(player: pymunk.BB, surface: pymunk.BB) -> bool:
    """Whether ``surface`` is directly under the player's feet."""
    feet = bottom_edge(player)
    surface_top = top_edge(surface)
    return (
        overlaps_x(player, surface)
        and feet <= surface_top + SUPPORT_SLACK
        and feet + SUPPORT_SLACK >= surface_top
    )
