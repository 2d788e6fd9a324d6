"""
Sitemap Writer - CLI

Command-line interface for building and checking sitemap documents.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from sitemap_writer.config import get_config, reload_config
from sitemap_writer.logging_config import setup_logging, get_logger
from sitemap_writer.sitemap import SitemapError, SitemapFile, SitemapParser


def load_urls(input_path: str) -> list:
    """Read the ``urls`` list from a YAML or JSON input file."""
    with open(input_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    urls = data.get("urls") if isinstance(data, dict) else None
    if not isinstance(urls, list):
        raise ValueError(f"{input_path} must contain a 'urls' list")
    return urls


def build(args) -> int:
    """Build a sitemap document from an input file."""
    config = reload_config(args.config) if args.config else get_config()
    setup_logging(level=config.log_level)
    logger = get_logger("cli")

    urls = load_urls(args.input)

    with SitemapFile(args.output) as sitemap:
        for item in urls:
            if isinstance(item, dict):
                options = dict(item)
                location = options.pop("loc", None)
            else:
                location, options = item, None
            sitemap.write_url(location, options)

    logger.info(f"Built sitemap with {sitemap.entries_count} URLs", extra={"path": args.output})

    print("\n" + "=" * 50)
    print("SITEMAP WRITTEN")
    print("=" * 50)
    print(f"File:       {args.output}")
    print(f"URLs:       {sitemap.entries_count}")
    print(f"Namespaces: {', '.join(name for name, _ in sitemap.capabilities.namespaces())}")
    print("=" * 50)
    return 0


def check(args) -> int:
    """Parse a sitemap document and print a summary."""
    setup_logging(level="WARNING")

    content = Path(args.file).read_bytes()
    parser = SitemapParser()
    entries = parser.parse_urlset(content)
    prefixes = [prefix for prefix in parser.declared_namespaces(content) if prefix]

    print("\n" + "=" * 50)
    print("SITEMAP SUMMARY")
    print("=" * 50)
    print(f"URLs:       {len(entries)}")
    print(f"News:       {sum(1 for e in entries if e.news_title)}")
    print(f"Images:     {sum(len(e.image_locations) for e in entries)}")
    print(f"Videos:     {sum(len(e.video_titles) for e in entries)}")
    print(f"Alternates: {sum(len(e.alternates) for e in entries)}")
    print(f"Prefixes:   {', '.join(sorted(prefixes)) or '(none)'}")
    print("=" * 50)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI main entry point."""
    parser = argparse.ArgumentParser(
        description="Sitemap Writer CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # build command
    build_parser = subparsers.add_parser(
        "build",
        help="Write a sitemap from a YAML/JSON list of URLs"
    )
    build_parser.add_argument("input", help="Input file with a 'urls' list")
    build_parser.add_argument(
        "-o", "--output",
        default="sitemap.xml",
        help="Sitemap file to write (default: sitemap.xml)"
    )
    build_parser.add_argument(
        "--config",
        help="YAML config file with base_url, timezone and defaults"
    )
    build_parser.set_defaults(func=build)

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Summarize an existing sitemap"
    )
    check_parser.add_argument("file", help="Sitemap file to read")
    check_parser.set_defaults(func=check)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except (SitemapError, ValueError, OSError) as e:
        get_logger("cli").error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
