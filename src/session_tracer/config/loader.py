import warnings
from typing import Any, Dict

import yaml

from session_tracer.core.registers import REGISTER_IDS
from .models import (
    DisplaySettings,
    MemorySettings,
    ProgramConfig,
    RegisterSettings,
    SessionConfig,
    SessionSettings,
)

KNOWN_SECTIONS = ("program", "session", "registers", "memory", "display")

class ConfigLoader:
    def load_from_file(self, path: str) -> SessionConfig:
        with open(path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        return self.load_from_dict(data or {})

    def load_from_dict(self, data: Dict[str, Any]) -> SessionConfig:
        if not isinstance(data, dict):
            raise ValueError("Session config must be a mapping.")

        for key in data:
            if key not in KNOWN_SECTIONS:
                warnings.warn(f"Unknown config section '{key}' ignored")

        return SessionConfig(
            program=self._parse_program(self._section(data, "program")),
            session=self._parse_session(self._section(data, "session")),
            registers=self._parse_registers(self._section(data, "registers")),
            memory=self._parse_memory(self._section(data, "memory")),
            display=self._parse_display(self._section(data, "display")),
        )

    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"Config section '{name}' must be a mapping.")
        return section

    def _parse_program(self, data: Dict[str, Any]) -> ProgramConfig:
        defaults = ProgramConfig()
        return ProgramConfig(
            base_address=self._parse_int(data.get("base_address", defaults.base_address)),
            instruction_count=self._parse_positive(data, "instruction_count", defaults.instruction_count),
            instruction_width=self._parse_positive(data, "instruction_width", defaults.instruction_width),
            annotation_probability=float(data.get("annotation_probability", defaults.annotation_probability)),
        )

    def _parse_session(self, data: Dict[str, Any]) -> SessionSettings:
        defaults = SessionSettings()
        seed = data.get("seed")
        return SessionSettings(
            initial_index=self._parse_int(data.get("initial_index", defaults.initial_index)),
            history_limit=self._parse_positive(data, "history_limit", defaults.history_limit),
            highlight_delay_ms=self._parse_positive(data, "highlight_delay_ms", defaults.highlight_delay_ms),
            mutation_policy=str(data.get("mutation_policy", defaults.mutation_policy)),
            seed=self._parse_int(seed) if seed is not None else None,
        )

    def _parse_registers(self, data: Dict[str, Any]) -> RegisterSettings:
        initial = data.get("initial") or {}
        if not isinstance(initial, dict):
            raise ValueError("Config key 'registers.initial' must be a mapping.")
        for name in initial:
            if name not in REGISTER_IDS:
                raise ValueError(f"Config key 'registers.initial.{name}' is not a known register.")
        return RegisterSettings(
            sp=self._parse_int(data.get("sp", RegisterSettings().sp)),
            initial={str(name): self._parse_int(value) for name, value in initial.items()},
        )

    def _parse_memory(self, data: Dict[str, Any]) -> MemorySettings:
        defaults = MemorySettings()
        return MemorySettings(
            base_address=self._parse_int(data.get("base_address", defaults.base_address)),
            length=self._parse_positive(data, "length", defaults.length),
        )

    def _parse_display(self, data: Dict[str, Any]) -> DisplaySettings:
        defaults = DisplaySettings()
        return DisplaySettings(
            process_id=self._parse_int(data.get("process_id", defaults.process_id)),
            architecture=str(data.get("architecture", defaults.architecture)),
            endianness=str(data.get("endianness", defaults.endianness)),
        )

    def _parse_positive(self, data: Dict[str, Any], key: str, default: int) -> int:
        value = self._parse_int(data.get(key, default))
        if value <= 0:
            raise ValueError(f"Config key '{key}' must be a positive integer: {value}")
        return value

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
