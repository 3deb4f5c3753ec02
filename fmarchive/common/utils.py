"""Utility functions used throughout the application."""

import os
from typing import List, Optional


def format_bytes(num_bytes: Optional[int]) -> str:
    """Convert bytes to human readable format."""
    if num_bytes is None:
        return "Unknown size"

    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    for unit in units:
        if size < 1024 or unit == units[-1]:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{int(num_bytes)} B"


def clean_path(path_str: str) -> str:
    """Clean input paths from quotes and extra spaces."""
    cleaned = str(path_str).strip().strip("'").strip('"')
    cleaned = cleaned.replace("\\ ", " ")
    return os.path.expanduser(cleaned)


def dedupe_paths(paths: List[str]) -> List[str]:
    """Remove duplicate paths while preserving order."""
    seen = set()
    unique_paths = []
    for path in paths:
        key = os.path.normcase(os.path.abspath(path))
        if key in seen:
            continue
        seen.add(key)
        unique_paths.append(path)
    return unique_paths
