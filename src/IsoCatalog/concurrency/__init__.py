# === NAVMAP v1 ===
# {
#   "module": "IsoCatalog.concurrency.__init__",
#   "purpose": "Concurrency helpers shared across IsoCatalog components.",
#   "sections": []
# }
# === /NAVMAP ===

"""
Concurrency helpers shared across IsoCatalog components.

Exposes the fan-out/flatten combinator used by source generators and the link
validator to launch independent async units, await them all, and collapse a
known number of optional/list wrappers into one ordered sequence.
"""

from .fanout import fan_out, fan_out_flat, flatten

__all__ = ["fan_out", "fan_out_flat", "flatten"]
