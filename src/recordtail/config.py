from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass
class TailConfig:
    # Sleep between poll iterations (milliseconds)
    poll_interval_ms: int = 1000
    # Bounded retry for metadata reads while the file is momentarily absent
    probe_attempts: int = 3
    probe_delay_ms: int = 100
    # Decoding applied to accumulated bytes before validation/delivery
    encoding: str = "utf-8"
    errors: str = "replace"

    @property
    def poll_interval_s(self) -> float:
        return self.poll_interval_ms / 1000.0

    @property
    def probe_delay_s(self) -> float:
        return self.probe_delay_ms / 1000.0

    def validate(self) -> "TailConfig":
        if isinstance(self.poll_interval_ms, bool) or not isinstance(self.poll_interval_ms, int):
            raise ConfigurationError(f"poll interval must be an integer number of milliseconds, got {self.poll_interval_ms!r}")
        if self.poll_interval_ms < 0:
            raise ConfigurationError(f"poll interval must be >= 0, got {self.poll_interval_ms}")
        if self.probe_attempts < 1:
            raise ConfigurationError(f"probe_attempts must be >= 1, got {self.probe_attempts}")
        if self.probe_delay_ms < 0:
            raise ConfigurationError(f"probe_delay_ms must be >= 0, got {self.probe_delay_ms}")
        try:
            "".encode(self.encoding)
        except LookupError as exc:
            raise ConfigurationError(f"unknown encoding {self.encoding!r}") from exc
        return self
