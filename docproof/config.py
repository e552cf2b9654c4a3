"""Backend configuration."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BackendConfig:
    """Configuration for compiling and running a proving backend.

    Attributes:
        verification_key_id: Previously published key id. When set, compiling
            a program that yields a different id is a fatal error.
        concurrent_gates: Prove the two children of a gate concurrently
            instead of left then right. With the reference program the
            children run on separate worker threads, so the overlap is
            limited by the GIL.
        snapshot_map: Prove against a snapshot of the map so the owner may keep
            mutating it while proofs are in flight.
    """

    verification_key_id: Optional[str] = None
    concurrent_gates: bool = False
    snapshot_map: bool = True


DEFAULT_CONFIG = BackendConfig()
