"""
toyasm Configuration
====================

Assembly options shared by the library facade and the CLI. Configuration
can come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Explicit keyword arguments / command-line options, which win
"""

from dataclasses import dataclass
import os

# Labels are 16-bit addresses
MAX_ORIGIN = 0xFFFF


@dataclass
class AssemblerConfig:
    """
    Options for one assembly run.

    Attributes:
        origin: Output offset of the first operation (labels bind relative
                to this; default: 0)
        filename: Name reported in error locations (default: "<input>")
        strict_redefinition: Raise DuplicateSymbolError when a variable is
                             bound twice, instead of overwriting it
                             (default: False)
    """

    origin: int = 0
    filename: str = "<input>"
    strict_redefinition: bool = False

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            TOYASM_ORIGIN: Origin offset (decimal, or hex with $ or 0x), at most $FFFF
            TOYASM_STRICT: "1", "true" or "yes" enables strict redefinition

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if origin := os.environ.get("TOYASM_ORIGIN"):
            try:
                value = parse_number(origin)
                if value <= MAX_ORIGIN:
                    config.origin = value
            except ValueError:
                pass  # Ignore invalid values

        if strict := os.environ.get("TOYASM_STRICT"):
            config.strict_redefinition = strict.strip().lower() in ("1", "true", "yes")

        return config


def parse_number(text: str) -> int:
    """
    Parse a decimal or $/0x-prefixed hexadecimal number.

    Raises:
        ValueError: If the text is not a non-negative number
    """
    text = text.strip()
    if text.startswith("$"):
        value = int(text[1:], 16)
    elif text.lower().startswith("0x"):
        value = int(text[2:], 16)
    else:
        value = int(text)
    if value < 0:
        raise ValueError(f"negative value: {text}")
    return value
