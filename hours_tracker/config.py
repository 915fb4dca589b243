"""
Configuration for the hours tracker.

This module centralizes default paths and the settings that shape imports.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .legacy_parser import LegacyLayout, default_layout


DEFAULT_DATA_FILE = str(Path.home() / '.hours_tracker' / 'state.json')


@dataclass
class Config:
    """
    Application configuration.

    Attributes:
        data_file: JSON file holding the persisted state
        user_name: Owner name written into a fresh state
        year: Year of the legacy monthly report
        legacy_months: Months that have an hours sheet in the legacy report
        verbose: Whether to enable verbose logging
        use_colors: Whether to color log output on terminals
    """
    data_file: str = DEFAULT_DATA_FILE
    user_name: str = 'User'
    year: int = 2025
    legacy_months: List[int] = field(default_factory=lambda: [10, 11, 12])
    verbose: bool = False
    use_colors: bool = True

    def validate(self):
        """
        Validate configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.data_file or not str(self.data_file).strip():
            raise ValueError("Data file path is required")

        if not self.user_name or not self.user_name.strip():
            raise ValueError("User name cannot be empty")

        if not (2000 <= self.year <= 2100):
            raise ValueError(f"Year must be between 2000 and 2100, got: {self.year}")

        if not self.legacy_months:
            raise ValueError("legacy_months list cannot be empty")
        for m in self.legacy_months:
            if not (1 <= m <= 12):
                raise ValueError(f"Month number {m} out of range (must be 1-12)")

    @property
    def data_path(self) -> Path:
        return Path(self.data_file).expanduser()

    def legacy_layout(self) -> LegacyLayout:
        """Legacy report layout for the configured year and months."""
        return default_layout(self.year, self.legacy_months)
