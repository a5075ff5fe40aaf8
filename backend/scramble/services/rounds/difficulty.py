"""Level -> round configuration.

Difficulty rises in steps: longer roots and longer rounds as the level
climbs, while short words get capped or pushed out of the target set so a
bigger word pool does not make rounds easier.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

Caps = Tuple[Tuple[int, int], ...]


@dataclass(frozen=True)
class RoundConfig:
    root_length: int
    min_target_len: int
    max_target_len: int
    duration_seconds: int
    max_targets: int
    # (length, cap) pairs; lengths not listed are unbounded
    length_caps: Caps = ()

    def __post_init__(self):
        caps: Union[Caps, Dict[int, int]] = self.length_caps
        pairs = caps.items() if isinstance(caps, dict) else caps
        # dicts are accepted and normalized to sorted pairs
        object.__setattr__(self, 'length_caps', tuple(sorted((int(k), int(v)) for k, v in pairs)))

    def cap_for(self, length: int) -> Optional[int]:
        for capped, cap in self.length_caps:
            if capped == length:
                return cap
        return None

    def to_dict(self) -> dict:
        return {
            'root_length': self.root_length,
            'min_target_len': self.min_target_len,
            'max_target_len': self.max_target_len,
            'duration_seconds': self.duration_seconds,
            'max_targets': self.max_targets,
            'length_caps': {str(k): v for k, v in self.length_caps},
        }


# (max_level, config); first match wins, None is the catch-all
DIFFICULTY_TABLE: Tuple[Tuple[Optional[int], RoundConfig], ...] = (
    (3, RoundConfig(root_length=6, min_target_len=3, max_target_len=6, duration_seconds=100, max_targets=15)),
    (5, RoundConfig(root_length=7, min_target_len=3, max_target_len=7, duration_seconds=120, max_targets=20,
                    length_caps=((3, 6),))),
    (6, RoundConfig(root_length=7, min_target_len=4, max_target_len=7, duration_seconds=120, max_targets=20)),
    (8, RoundConfig(root_length=7, min_target_len=4, max_target_len=7, duration_seconds=150, max_targets=25)),
    (10, RoundConfig(root_length=7, min_target_len=4, max_target_len=7, duration_seconds=150, max_targets=25,
                     length_caps=((4, 2),))),
    (15, RoundConfig(root_length=8, min_target_len=4, max_target_len=8, duration_seconds=180, max_targets=30,
                     length_caps=((4, 2),))),
    (None, RoundConfig(root_length=8, min_target_len=4, max_target_len=8, duration_seconds=200, max_targets=35,
                       length_caps=((4, 2),))),
)


def config_for_level(level: int, table=DIFFICULTY_TABLE) -> RoundConfig:
    level = max(1, int(level))
    for max_level, config in table:
        if max_level is None or level <= max_level:
            return config
    # tables without a catch-all row fall back to their last row
    return table[-1][1]
