"""
Compiler configuration.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CompilerOptions:
    """Settings shared by the driver and the host factory."""
    encoding: str = "utf-8"
    filename: Optional[str] = None  # Overrides the name shown in diagnostics
    register_in_sys_modules: bool = False
    debug: bool = False
