#!/usr/bin/env python3
"""
pagescribe CLI - Transcribe documents to markdown with vision models

Commands:
    scribe convert <file>      Transcribe a document (PDF, image, office file, URL)
    scribe extract <file>      Extract structured JSON with a template or schema
    scribe templates           List built-in extraction templates
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from cli import main


if __name__ == '__main__':
    main()
