#!/usr/bin/env python3
"""
Email Template Generator – Jira → Gemini → Claude → GitLab

Thin entrypoint that delegates to the modular package in `app/tmplgen/`.
"""
from __future__ import annotations

import sys

from tmplgen.cli import run


if __name__ == "__main__":
    sys.exit(run())
