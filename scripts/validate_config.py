#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pushup_challenge.config.loader import ConfigLoader
from pushup_challenge.config.validation import ConfigValidator, ValidationError
from pushup_challenge.errors import MalformedDataError


def validate_config_dir(config_dir: Path) -> List[ValidationError]:
    """Validate challenge.yaml merged over the defaults."""
    loader = ConfigLoader.create(config_dir)
    return ConfigValidator.validate_config(loader.merge_config())


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else project_root / "config"
    print(f"🔍 Validating {config_dir / 'challenge.yaml'}...")

    try:
        errors = validate_config_dir(config_dir)
    except MalformedDataError as e:
        print(f"❌ Could not read configuration: {e}")
        sys.exit(1)

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        sys.exit(1)

    config = ConfigLoader.create(config_dir).load()
    print(f"✅ Reference zone: {config.time.timezone}")
    print(f"✅ Quiet hours: {config.time.restricted_start_hour:02d}:00-{config.time.restricted_end_hour:02d}:00")
    print(f"✅ Reminder sink: {config.notification.sink}")
    print(f"✅ Settings database: {config.storage.db_path}")
    print("\n🎉 Configuration validation passed!")
    sys.exit(0)


if __name__ == "__main__":
    main()
