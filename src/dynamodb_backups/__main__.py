"""
Module entry point.

This allows the tool to be run as:
python -m dynamodb_backups
"""

from dynamodb_backups.main import main

if __name__ == "__main__":
    exit(main())
