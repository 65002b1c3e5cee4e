from lx.config import ConfigError, LxConfig
from lx.core.ports.oracle import CodeOracle
from lx.oracle.gemini import GeminiOracle


def create_oracle(config: LxConfig) -> CodeOracle:
    if config.provider == "gemini":
        return GeminiOracle(api_key=config.api_key, model=config.model)
    raise ConfigError(f"Unsupported provider '{config.provider}'")


__all__ = [
    "GeminiOracle",
    "create_oracle",
]
