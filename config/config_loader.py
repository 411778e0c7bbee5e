import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, List
import yaml

from utils.logger import setup_logger

logger = setup_logger(__name__)


class ConfigurationError(Exception):
    pass


class ConfigLoader:
    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            base_dir = Path(__file__).resolve().parent
            config_path = base_dir / "config.yaml"

        self.config_path = Path(config_path)
        self._config: Optional[Dict[str, Any]] = None
        self._last_loaded: Optional[float] = None

    def load(self, force_reload: bool = False) -> Dict[str, Any]:
        if not self.config_path.exists():
            raise ConfigurationError(f"config file not found: {self.config_path}")

        current_mtime = self.config_path.stat().st_mtime

        if not force_reload and self._config is not None and self._last_loaded == current_mtime:
            return self._config

        logger.info(
            "Loading configuration from file",
            extra={"config_path": str(self.config_path)}
        )

        with open(self.config_path, "r") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raise ConfigurationError("config file is empty")

        if not isinstance(raw_config, dict):
            raise ConfigurationError("config file must contain a mapping at the top level")

        self._config = self._interpolate_env_vars(raw_config)
        self._last_loaded = current_mtime

        return self._config

    def _interpolate_env_vars(self, config: Any) -> Any:
        if isinstance(config, dict):
            return {
                key: self._interpolate_env_vars(value)
                for key, value in config.items()
            }
        elif isinstance(config, list):
            return [self._interpolate_env_vars(item) for item in config]
        elif isinstance(config, str):
            return self._replace_env_vars_in_string(config)
        else:
            return config

    def _replace_env_vars_in_string(self, value: str) -> Any:
        pattern = re.compile(r'\$\{([^}]+)\}')

        def replacer(match):
            env_var = match.group(1)
            env_value = os.getenv(env_var)

            if env_value is None:
                logger.warning(
                    f"Environment variable not found: {env_var}",
                    extra={"env_var": env_var}
                )
                return match.group(0)

            return env_value

        replaced = pattern.sub(replacer, value)
        if replaced == value:
            return value

        # "${SIMILARITY_THRESHOLD}" should come back as a number, not a string
        return yaml.safe_load(replaced)

    def get(self, path: str, default: Any = None) -> Any:
        if self._config is None:
            self.load()

        keys = path.split('.')
        current = self._config

        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def reload(self) -> Dict[str, Any]:
        logger.info("Reloading configuration")
        return self.load(force_reload=True)


class ConfigValidator:
    @staticmethod
    def _is_fraction(value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 1

    @staticmethod
    def validate_similarity_config(config: Dict[str, Any]) -> List[str]:
        errors = []

        similarity = config.get('similarity', {})
        weights = similarity.get('weights', {})

        total = 0.0
        for key in ['category', 'pricing', 'rating', 'text']:
            value = weights.get(key)
            if value is None:
                continue
            if not ConfigValidator._is_fraction(value):
                errors.append(f"invalid similarity weight {key}: {value} (must be between 0 and 1)")
                continue
            total += value

        if total > 1.0 + 1e-9:
            errors.append(f"similarity weights sum to {round(total, 4)} (must not exceed 1.0)")

        min_len = similarity.get('min_token_length')
        if min_len is not None and (not isinstance(min_len, int) or min_len < 0):
            errors.append(f"invalid min_token_length: {min_len}")

        rating_window = similarity.get('rating_window')
        if rating_window is not None and (not isinstance(rating_window, (int, float)) or rating_window < 0):
            errors.append(f"invalid rating_window: {rating_window}")

        return errors

    @staticmethod
    def validate_alternatives_config(config: Dict[str, Any]) -> List[str]:
        errors = []

        alternatives = config.get('alternatives', {})

        for key in ['score_threshold', 'feature_threshold']:
            value = alternatives.get(key)
            if value is not None and not ConfigValidator._is_fraction(value):
                errors.append(f"invalid {key}: {value} (must be between 0 and 1)")

        for key in ['default_limit', 'preview_page_size']:
            value = alternatives.get(key)
            if value is not None and (not isinstance(value, int) or value < 1):
                errors.append(f"invalid {key}: {value} (must be a positive integer)")

        return errors

    @staticmethod
    def validate(config: Dict[str, Any]) -> List[str]:
        all_errors = []

        all_errors.extend(ConfigValidator.validate_similarity_config(config))
        all_errors.extend(ConfigValidator.validate_alternatives_config(config))

        return all_errors


config_loader: Optional[ConfigLoader] = None


def init_config_loader(config_path: Optional[Path] = None) -> ConfigLoader:
    global config_loader
    loader = ConfigLoader(config_path=config_path)

    config = loader.load()

    validation_errors = ConfigValidator.validate(config)
    if validation_errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {err}" for err in validation_errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    config_loader = loader
    logger.info("Configuration validated successfully")

    return config_loader


def get_config_loader() -> ConfigLoader:
    if config_loader is None:
        raise ConfigurationError("config loader not initialized. Call init_config_loader() first")
    return config_loader


def get_tunable(path: str, default: Any) -> Any:
    """Read a value from the active config file, or ``default`` before init."""
    if config_loader is None:
        return default
    return config_loader.get(path, default)


def reset_config_loader() -> None:
    global config_loader
    config_loader = None
