#!/usr/bin/env python3
"""
Setup script for the xibao caption bot.
Creates a sample environment file, validates configuration and renders captions offline.
"""

import os
import sys
import asyncio
import argparse
from pathlib import Path

import yaml

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from shared_lib.assets import AssetStore
from shared_lib.config import create_sample_env_file, load_config, ConfigurationError
from shared_lib.utils import setup_logging, format_bytes
from xibao.services.browser_renderer import PlaywrightRenderer
from xibao.services.caption_service import (
    CaptionService, EmptyCaptionError, VARIANTS, write_placeholder_backgrounds
)
from xibao.services.render_backends import create_render_backend


def create_env_file():
    """Create sample .env file."""
    env_path = project_root / ".env"

    if env_path.exists():
        response = input(f"{env_path} already exists. Overwrite? (y/N): ")
        if response.lower() != 'y':
            print("Skipping .env file creation.")
            return

    create_sample_env_file(str(env_path))
    print(f"Created {env_path}")
    print("Please edit the .env file with your actual configuration values.")


def validate_config(config_path=None):
    """Validate current configuration."""
    try:
        config = load_config(config_path)
        print("✓ Configuration is valid")
        print(yaml.safe_dump(config.to_dict(), allow_unicode=True, sort_keys=False))

        missing_vars = config.missing_required_values()
        if missing_vars:
            print("⚠ Missing required environment variables:")
            for var in missing_vars:
                print(f"  - {var}")
        else:
            print("✓ All required environment variables are set")

        assets = AssetStore(config.assets_dir)
        missing_assets = assets.missing(*(variant.background for variant in VARIANTS.values()))
        if missing_assets:
            print(f"⚠ Missing background images in {assets.directory}:")
            for name in missing_assets:
                print(f"  - {name}")

    except ConfigurationError as e:
        print(f"✗ Configuration error: {e}")
        return False

    return True


def create_backgrounds(config_path=None, overwrite=False):
    """Write placeholder backgrounds for variants without artwork."""
    config = load_config(config_path)
    assets = AssetStore(config.assets_dir)
    written = write_placeholder_backgrounds(
        assets.directory, (config.renderer.canvas_width, config.renderer.canvas_height), overwrite
    )
    for path in written:
        print(f"Created {path}")
    if not written:
        print(f"✓ All background images present in {assets.directory}")


async def render_caption(variant, text, output, config_path=None):
    """Render one caption to a PNG file with the configured backend."""
    config = load_config(config_path)
    browser = PlaywrightRenderer(config.renderer) if config.renderer.backend == "playwright" else None
    backend = create_render_backend(config.renderer, browser)
    service = CaptionService(config, backend, AssetStore(config.assets_dir).read_file)

    try:
        image = await service.render_caption(variant, text.replace("\\n", "\n"))
    finally:
        if browser is not None:
            await browser.close()

    Path(output).write_bytes(image)
    print(f"Wrote {output} ({format_bytes(len(image))})")


def main():
    """Main setup function."""
    parser = argparse.ArgumentParser(description="Setup the xibao caption bot")
    parser.add_argument("--env", action="store_true", help="Create .env file")
    parser.add_argument("--validate", action="store_true", help="Validate configuration")
    parser.add_argument("--backgrounds", action="store_true", help="Write placeholder background images")
    parser.add_argument("--overwrite", action="store_true", help="Replace existing images with --backgrounds")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--render", nargs=2, metavar=("VARIANT", "TEXT"),
                        help="Render a caption offline; '\\n' in TEXT starts a new line")
    parser.add_argument("-o", "--output", default="caption.png", help="Output file for --render")

    args = parser.parse_args()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    if not any([args.env, args.backgrounds, args.validate, args.render]):
        parser.print_help()
        return 0

    if args.env:
        create_env_file()
    if args.backgrounds:
        try:
            create_backgrounds(args.config, args.overwrite)
        except ConfigurationError as e:
            print(f"✗ Configuration error: {e}")
            return 1
    if args.validate and not validate_config(args.config):
        return 1
    if args.render:
        variant, text = args.render
        if variant not in VARIANTS:
            print(f"✗ Unknown variant {variant!r}, choose from: {', '.join(VARIANTS)}")
            return 1
        try:
            asyncio.run(render_caption(variant, text, args.output, args.config))
        except EmptyCaptionError as e:
            print(f"✗ {e.message}")
            return 1
        except ConfigurationError as e:
            print(f"✗ Configuration error: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
