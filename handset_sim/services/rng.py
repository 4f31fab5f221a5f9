"""Seeded random number fan-out for round settlement.

Every stochastic draw in the kernel comes from a generator derived from
(root seed, round number, subsystem name). Subsystems never share a stream,
so the order in which they run cannot change what any of them draws.

Usage:
    from handset_sim.services.rng import SeedBundle

    bundle = SeedBundle.for_round("match-42", round_number=3)
    bundle.economy.random()
    bundle.for_team("supply_chain", "team-a").uniform(0.2, 0.5)
"""

import hashlib
import random
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, TypeVar

T = TypeVar("T")

# Subsystems that get a dedicated stream every round
SUBSYSTEMS = ("economy", "market", "supply_chain", "tariffs", "general")


def derive_seed(root_seed: str, round_number: int, subsystem: str) -> int:
    """Hash (root, round, subsystem) into a 64-bit integer seed."""
    material = f"{root_seed}|{round_number}|{subsystem}".encode("utf-8")
    digest = hashlib.sha256(material).digest()
    return int.from_bytes(digest[:8], "big")


def make_rng(root_seed: str, round_number: int, subsystem: str) -> random.Random:
    """Create an isolated generator for one subsystem in one round."""
    return random.Random(derive_seed(root_seed, round_number, subsystem))


def sample_subset(rng: random.Random, items: Sequence[T], min_size: int, max_size: int) -> List[T]:
    """Pick a random subset whose size is uniform in [min_size, max_size].

    Result keeps the original ordering of ``items`` so callers get stable output.
    """
    max_size = min(max_size, len(items))
    min_size = min(min_size, max_size)
    size = rng.randint(min_size, max_size)
    chosen = set(rng.sample(range(len(items)), size))
    return [item for i, item in enumerate(items) if i in chosen]


@dataclass
class SeedBundle:
    """Per-round set of generators, one per subsystem."""
    root_seed: str
    round_number: int
    seeds: Dict[str, int] = field(default_factory=dict)
    _streams: Dict[str, random.Random] = field(default_factory=dict, repr=False)

    @classmethod
    def for_round(cls, root_seed: str, round_number: int) -> "SeedBundle":
        bundle = cls(root_seed=root_seed, round_number=round_number)
        for name in SUBSYSTEMS:
            bundle.stream(name)
        return bundle

    def stream(self, name: str) -> random.Random:
        """Get (or lazily create) the generator for a named stream."""
        if name not in self._streams:
            seed = derive_seed(self.root_seed, self.round_number, name)
            self.seeds[name] = seed
            self._streams[name] = random.Random(seed)
        return self._streams[name]

    def for_team(self, subsystem: str, team_id: str) -> random.Random:
        return self.stream(f"{subsystem}:{team_id}")

    @property
    def economy(self) -> random.Random:
        return self.stream("economy")

    @property
    def market(self) -> random.Random:
        return self.stream("market")

    @property
    def tariffs(self) -> random.Random:
        return self.stream("tariffs")

    @property
    def general(self) -> random.Random:
        return self.stream("general")

    def to_dict(self) -> Dict:
        return {
            "root_seed": self.root_seed,
            "round_number": self.round_number,
            "seeds": {name: self.seeds[name] for name in sorted(self.seeds)},
        }
