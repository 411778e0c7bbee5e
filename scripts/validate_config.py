#!/usr/bin/env python
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.config_loader import ConfigurationError, init_config_loader
from utils.logger import setup_logger

logger = setup_logger(__name__)


def validate_configuration(config_path: Optional[Path] = None) -> bool:
    print("\n" + "="*80)
    print(" Interaction Engine Configuration Validator")
    print("="*80 + "\n")

    try:
        loader = init_config_loader(config_path)
    except ConfigurationError as e:
        print(f"\n[ERROR] {e}\n")
        return False

    config = loader.load()
    weights = config.get('similarity', {}).get('weights', {})
    alternatives = config.get('alternatives', {})

    print("[INFO] All validation checks passed\n")
    print("Configuration Summary:")
    print("-" * 80)
    print(f"  Config file:        {loader.config_path}")
    print(f"  Similarity weights: {weights}")
    print(f"  Score threshold:    {alternatives.get('score_threshold')}")
    print(f"  Default limit:      {alternatives.get('default_limit')}")
    print(f"  Preview page size:  {alternatives.get('preview_page_size')}")
    print("-" * 80 + "\n")

    return True


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    success = validate_configuration(path)
    sys.exit(0 if success else 1)
