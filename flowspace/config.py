"""
Configuration management for FlowSpace.

This module centralizes all configuration settings following 12-factor app principles:
- Secrets loaded from environment variables
- Sensible defaults for development
- Single source of truth for all settings
- Thread-safe token tracking
"""

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class ModelConfig:
    """LLM model configuration with OpenAI API settings."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    model_name: str = field(
        default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    )
    base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "60.0"))
    )

    # Feature-specific temperatures
    quiz_temperature: float = 0.7
    checkin_temperature: float = 0.9
    plan_temperature: float = 0.7

    # Reproducibility
    # FLOWSPACE_DETERMINISTIC=true zeroes every temperature for reproducible outputs
    deterministic: bool = field(
        default_factory=lambda: os.getenv("FLOWSPACE_DETERMINISTIC", "").strip().lower()
        in ("1", "true", "yes")
    )

    def __post_init__(self):
        if self.deterministic:
            self.quiz_temperature = 0.0
            self.checkin_temperature = 0.0
            self.plan_temperature = 0.0


@dataclass
class ServerConfig:
    """HTTP API settings."""

    host: str = field(default_factory=lambda: os.getenv("FLOWSPACE_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("FLOWSPACE_PORT", "3000")))
    cors_origins: list[str] = field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.getenv("FLOWSPACE_CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
    )
    ui_port: int = field(default_factory=lambda: int(os.getenv("FLOWSPACE_UI_PORT", "7860")))


@dataclass
class TimerConfig:
    """Flow timer levels: (label, focus minutes, break minutes)."""

    levels: dict = field(
        default_factory=lambda: {
            "soft": ("💧 Soft Start", 5, 2),
            "focus": ("🔥 Lock In", 15, 3),
            "deep": ("💀 Deep Focus", 25, 5),
        }
    )
    default_level: str = "soft"
    tick_seconds: float = 1.0


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    package_root: Path = field(default_factory=lambda: Path(__file__).parent)
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("FLOWSPACE_DATA_DIR", str(Path.home() / ".flowspace"))
        )
    )

    schemas_dir: Path = field(init=False)
    quiz_schema: Path = field(init=False)
    checkin_schema: Path = field(init=False)
    plan_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.data_dir = Path(self.data_dir).expanduser().resolve()
        self.schemas_dir = self.package_root / "schemas"
        self.quiz_schema = self.schemas_dir / "quiz.schema.json"
        self.checkin_schema = self.schemas_dir / "checkin.schema.json"
        self.plan_schema = self.schemas_dir / "plan.schema.json"

    def prepare_filesystem(self):
        """
        Create the data directory if it doesn't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging and metrics configuration with env-driven pricing."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    log_tokens: bool = True
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    cost_per_1k_input: float = field(
        default_factory=lambda: float(os.getenv("COST_PER_1K_INPUT", "0.00015"))
    )
    cost_per_1k_output: float = field(
        default_factory=lambda: float(os.getenv("COST_PER_1K_OUTPUT", "0.0006"))
    )


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from flowspace.config import config

        api_key = config.model.api_key
        port = config.server.port

        # Prepare filesystem (call once at startup)
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.model = ModelConfig()
            cls._instance.server = ServerConfig()
            cls._instance.timer = TimerConfig()
            cls._instance.logging = LoggingConfig()

        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.model.api_key:
            errors.append("OPENAI_API_KEY not set in environment")

        for name in ("quiz_temperature", "checkin_temperature", "plan_temperature"):
            value = getattr(self.model, name)
            if not (0 <= value <= 2):
                errors.append(f"{name} must be in [0, 2], got {value}")

        if self.model.request_timeout <= 0:
            errors.append(
                f"request_timeout must be > 0, got {self.model.request_timeout}"
            )

        if not (0 < self.server.port < 65536):
            errors.append(f"port must be in (0, 65536), got {self.server.port}")

        if self.timer.default_level not in self.timer.levels:
            errors.append(
                f"Timer default_level '{self.timer.default_level}' is not a known level"
            )

        for level, (_, focus_minutes, break_minutes) in self.timer.levels.items():
            if focus_minutes <= 0 or break_minutes <= 0:
                errors.append(
                    f"Timer level '{level}' durations must be > 0, "
                    f"got {focus_minutes}/{break_minutes}"
                )

        for schema in (
            self.paths.quiz_schema,
            self.paths.checkin_schema,
            self.paths.plan_schema,
        ):
            if not schema.exists():
                errors.append(f"Schema not found: {schema}")

        if self.logging.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            errors.append(f"Unknown log level: {self.logging.log_level}")

        return errors


# Global config instance
config = Config()


class TokenTracker:
    """
    Thread-safe tracker for token usage and estimated costs.

    Usage:
        from flowspace.config import token_tracker

        token_tracker.add_tokens(input_tokens=100, output_tokens=50)
        print(token_tracker.summary())
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.input_tokens = 0
        self.output_tokens = 0
        self.total_calls = 0

    def add_tokens(self, input_tokens: int, output_tokens: int):
        """Add tokens from an API call (thread-safe)."""
        with self._lock:
            self.input_tokens += input_tokens
            self.output_tokens += output_tokens
            self.total_calls += 1

    def total_tokens(self) -> int:
        with self._lock:
            return self.input_tokens + self.output_tokens

    def estimated_cost(self) -> float:
        """Calculate estimated cost in USD (thread-safe)."""
        with self._lock:
            return self._cost(self.input_tokens, self.output_tokens)

    @staticmethod
    def _cost(input_tokens: int, output_tokens: int) -> float:
        input_cost = (input_tokens / 1000) * config.logging.cost_per_1k_input
        output_cost = (output_tokens / 1000) * config.logging.cost_per_1k_output
        return input_cost + output_cost

    def summary(self) -> str:
        """Get formatted summary of usage."""
        stats = self.get_stats()
        return (
            "Token Usage Summary:\n"
            f"  API Calls: {stats['calls']}\n"
            f"  Input Tokens: {stats['input_tokens']:,}\n"
            f"  Output Tokens: {stats['output_tokens']:,}\n"
            f"  Total Tokens: {stats['total_tokens']:,}\n"
            f"  Estimated Cost: ${stats['estimated_cost']:.4f}"
        )

    def reset(self):
        """Reset counters (thread-safe)."""
        with self._lock:
            self.input_tokens = 0
            self.output_tokens = 0
            self.total_calls = 0

    def get_stats(self) -> dict:
        """Get current stats as dict (single lock acquisition)."""
        with self._lock:
            input_tokens = self.input_tokens
            output_tokens = self.output_tokens
            total_calls = self.total_calls

        return {
            "calls": total_calls,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "estimated_cost": self._cost(input_tokens, output_tokens),
        }


# Global token tracker instance
token_tracker = TokenTracker()

