#!/usr/bin/env python3
"""
tables-to-go CLI.

Usage:
    python -m tables_to_go [options]

Examples:
    python -m tables_to_go -t pg -d shop -s public -o ./dto
    python -m tables_to_go -t mysql -u root -d shop --structable --structable-recorder
    python -m tables_to_go --config tables-to-go.yaml -v
"""

from __future__ import annotations

from tables_to_go.struct_codegen.main import main

if __name__ == "__main__":
    main()
