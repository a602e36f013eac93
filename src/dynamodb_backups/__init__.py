"""
DynamoDB Backup System.

Creates on-demand backups for DynamoDB tables selected by a name pattern
and deletes backups older than a retention window.
"""

__version__ = "1.0.0"
