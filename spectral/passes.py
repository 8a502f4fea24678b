"""
Ordered compute passes of one pipeline run.

Each pass names the passes whose output it reads. A pass may only run after
all of its inputs have fully completed; the pipeline runs passes one at a time
in sequence order, so a valid order is also a valid schedule.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from .params import ConfigurationError


@dataclass(frozen=True)
class PassDescription:
    name: str
    inputs: Tuple[str, ...] = ()


PASS_SEQUENCE: Tuple[PassDescription, ...] = (
    PassDescription("initialize_data"),
    PassDescription("fft_horizontal", ("initialize_data",)),
    PassDescription("fft_vertical", ("fft_horizontal",)),
    PassDescription("modify_frequencies", ("fft_vertical",)),
    PassDescription("ifft_vertical", ("modify_frequencies",)),
    PassDescription("ifft_horizontal", ("ifft_vertical",)),
    PassDescription("main_image", ("ifft_horizontal",)),
)


def validate_pass_order(passes: Iterable[PassDescription]) -> Tuple[PassDescription, ...]:
    """Reject duplicate names and passes that read an output not produced earlier."""
    passes = tuple(passes)
    seen = set()
    for desc in passes:
        if desc.name in seen:
            raise ConfigurationError(f"Pass '{desc.name}' appears more than once.")
        missing = [name for name in desc.inputs if name not in seen]
        if missing:
            raise ConfigurationError(
                f"Pass '{desc.name}' reads {', '.join(missing)} before it has run."
            )
        seen.add(desc.name)
    return passes


def pass_names(passes: Iterable[PassDescription] = PASS_SEQUENCE) -> Tuple[str, ...]:
    return tuple(desc.name for desc in passes)
