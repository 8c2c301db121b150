# planet_generator/runtime/tracker.py

"""
Keeps placed instances glued to a deforming surface.

After each displacement step every record's instance is moved back onto its
vertex's current position and re-stood along the current outward direction,
with its creation-time spin and jitter re-applied. The scatter selection is
never re-run.
"""
from ..scatter import place_instance


class PlacementTracker:
    """Re-synchronizes instance transforms with the vertices they follow."""

    def update(self, state) -> int:
        """Returns the number of instances re-synchronized."""
        synced = 0
        for record in state.records:
            if record.instance.released:
                continue
            if record.vertex_index >= record.mesh.vertex_count:
                # The vertex buffer was resized underneath the record.
                continue
            place_instance(record)
            synced += 1
        return synced
