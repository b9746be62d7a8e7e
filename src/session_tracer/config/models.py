from dataclasses import dataclass, field
from typing import Dict, Optional

from session_tracer.core.memory import DEFAULT_MEMORY_BASE, DEFAULT_MEMORY_LENGTH
from session_tracer.core.registers import DEFAULT_STACK_POINTER
from session_tracer.core.stream import DEFAULT_BASE_ADDRESS, INSTRUCTION_WIDTH

@dataclass
class ProgramConfig:
    base_address: int = DEFAULT_BASE_ADDRESS
    instruction_count: int = 2000
    instruction_width: int = INSTRUCTION_WIDTH
    annotation_probability: float = 0.3

@dataclass
class SessionSettings:
    initial_index: int = 1286
    history_limit: int = 11
    highlight_delay_ms: int = 1000
    mutation_policy: str = "random" # "random", "operand"
    seed: Optional[int] = None # Noneの場合はシードなし

@dataclass
class RegisterSettings:
    sp: int = DEFAULT_STACK_POINTER
    initial: Dict[str, int] = field(default_factory=dict)

@dataclass
class MemorySettings:
    base_address: int = DEFAULT_MEMORY_BASE
    length: int = DEFAULT_MEMORY_LENGTH

@dataclass
class DisplaySettings:
    process_id: int = 4921
    architecture: str = "AARCH64"
    endianness: str = "LITTLE"

@dataclass
class SessionConfig:
    program: ProgramConfig = field(default_factory=ProgramConfig)
    session: SessionSettings = field(default_factory=SessionSettings)
    registers: RegisterSettings = field(default_factory=RegisterSettings)
    memory: MemorySettings = field(default_factory=MemorySettings)
    display: DisplaySettings = field(default_factory=DisplaySettings)
