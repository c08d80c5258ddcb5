"""Strategy document loader for YAML and JSON files.

Strategy documents are usually produced by an upstream generator or written
by hand. This module reads them from disk and runs them through
normalise_dsl() so callers always receive a canonical StrategyDSL.

Classes:
    StrategyLoader: Load strategy documents from files or directories
    StrategyLoadError: Exception raised when a file cannot be loaded

Example:
    >>> from pathlib import Path
    >>> loader = StrategyLoader()
    >>> dsl = loader.load_file(Path("strategies/trend.yml"))
    >>> all_strategies = loader.load_directory(Path("strategies"))
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from strategy_lab.strategies.dsl import StrategyDSL, StrategyValidationError, normalise_dsl

logger = logging.getLogger(__name__)

STRATEGY_FILE_PATTERNS: tuple[str, ...] = ("*.yml", "*.yaml", "*.json")


class StrategyLoadError(Exception):
    """Exception raised when a strategy file cannot be parsed or normalized.

    Attributes:
        message: Human-readable error description
        path: Path to the file that failed to load
    """

    def __init__(self, message: str, path: Path) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} ({path})")


class StrategyLoader:
    """Load strategy documents into StrategyDSL models.

    JSON is a subset of YAML, so both formats go through yaml.safe_load.
    """

    def load_file(self, path: Path | str) -> StrategyDSL:
        """Load and normalize a single strategy file.

        Args:
            path: Path to a .yml, .yaml or .json file

        Returns:
            Normalized StrategyDSL

        Raises:
            FileNotFoundError: If the file doesn't exist
            StrategyLoadError: If parsing or normalization fails
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Strategy file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise StrategyLoadError(f"Syntax error: {e}", path) from e

        try:
            dsl = normalise_dsl(data)
        except StrategyValidationError as e:
            raise StrategyLoadError(f"Invalid strategy: {e.message}", path) from e

        logger.debug("Loaded strategy %r with %d rule(s) from %s", dsl.name, len(dsl.rules), path)
        return dsl

    def load_directory(self, directory: Path | str) -> list[StrategyDSL]:
        """Load every strategy file in a directory, sorted by file name.

        Files whose name starts with an underscore are skipped.

        Raises:
            FileNotFoundError: If the directory doesn't exist or is not a directory
            StrategyLoadError: If any file fails to load (fails fast)
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Strategy directory not found: {directory}")

        files = sorted(
            {
                file
                for pattern in STRATEGY_FILE_PATTERNS
                for file in directory.glob(pattern)
                if file.is_file() and not file.name.startswith("_")
            }
        )
        return [self.load_file(file) for file in files]
