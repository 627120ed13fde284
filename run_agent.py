# run_agent.py
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from site_agent import config
from site_agent.errors import SiteAgentError
from site_agent.main import analyze_html_file, run_capability


def configure_logging(verbose: bool = False, log_file_path: Path = config.LOG_FILE):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)-8s - %(name)-25s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG) # Everything goes to the file
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Console logs go to stderr so the report on stdout stays clean.
    rich_handler = RichHandler(
        level=logging.DEBUG if verbose else logging.INFO,
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        show_path=False,
    )
    root_logger.addHandler(rich_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze a web page's structure or read the text in its images.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('--verbose', '-v', action='store_true', help="Show DEBUG logs on the console.")
    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze = subparsers.add_parser('analyze', help="Summarize categories, products and navigation of a page.")
    analyze.add_argument('url', help="Absolute URL of the page.")

    ocr = subparsers.add_parser('ocr', help="Extract text from the page's images with OCR.")
    ocr.add_argument('url', help="Absolute URL of the page.")
    ocr.add_argument('--selector', default=None,
                     help="CSS selector for the <img> elements to read (default: every image).")

    analyze_html = subparsers.add_parser('analyze-html', help="Summarize a saved HTML file without a browser.")
    analyze_html.add_argument('path', type=Path, help="Path of the HTML file.")
    analyze_html.add_argument('--no-products', action='store_true', help="List categories without their products.")
    return parser


def run(args: argparse.Namespace) -> str:
    if args.command == 'analyze':
        return asyncio.run(run_capability("analyzeSite", {"url": args.url}))
    if args.command == 'ocr':
        payload = {"url": args.url}
        if args.selector:
            payload["imageSelector"] = args.selector
        return asyncio.run(run_capability("extractTextFromImage", payload))
    return analyze_html_file(args.path, include_products=not args.no_products)


def main():
    args = build_parser().parse_args()
    configure_logging(verbose=args.verbose)
    console = Console()

    logging.info("=" * 60)
    logging.info("Site agent starting: %s", args.command)
    logging.info("=" * 60)

    exit_code = 0
    try:
        console.print(run(args), markup=False, highlight=False)
    except SiteAgentError as e:
        logging.error("%s", e)
        exit_code = 2
    except OSError as e:
        logging.error("Could not read input: %s", e)
        exit_code = 2
    except KeyboardInterrupt:
        logging.warning("Interrupted by user.")
        exit_code = 130
    finally:
        logging.info("Site agent finished.")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
