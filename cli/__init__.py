import argparse
from cli.convert import setup_convert_parser
from cli.extract import setup_extract_parser, setup_templates_parser


def create_parser():
    parser = argparse.ArgumentParser(
        prog='scribe',
        description='pagescribe - Transcribe documents to markdown with vision models',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Transcribe a whole PDF, 10 pages at a time
  scribe convert report.pdf --output-dir out/

  # Keep formatting consistent across pages (sequential)
  scribe convert report.pdf --maintain-format

  # Only pages 2, 5 and 7, printed as JSON
  scribe convert https://example.com/report.pdf --pages 2,5,7 --json

  # Structured extraction
  scribe extract invoice.pdf --template invoice
  scribe extract statement.pdf --schema fields.json --prompt "Amounts in EUR"
  scribe extract letter.docx --auto-schema

  # Built-in templates
  scribe templates
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')
    subparsers.required = True

    setup_convert_parser(subparsers)
    setup_extract_parser(subparsers)
    setup_templates_parser(subparsers)

    return parser


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    args.func(args)
