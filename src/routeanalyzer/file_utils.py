#!/usr/bin/env python3
"""
Output file helpers: reserving a result filename and writing the JSON result.
"""

import json
import logging
import os

from .analysis import AnalysisResult, result_to_dict

logger = logging.getLogger(__name__)

MAX_FILENAME_ATTEMPTS = 180


def generate_output_filename(input_filename: str) -> str:
    """
    Generates an output JSON filename and reserves it by creating an empty file.

    Strategy:
    1. Drop the extension of the input file (.csv, .gpx, ...)
    2. Append " analysis.json"
    3. If file exists, try " (1).json", " (2).json", etc. (by attempting to create exclusively)
    4. Stop at 180 attempts
    5. Use exclusive open (`open(path, 'x')`) to avoid race conditions and reserve the name.

    Args:
        input_filename: Path to the input route file

    Returns:
        Safe output filename that has been created as an empty file to reserve its name

    Raises:
        RuntimeError: If no available filename found after 180 attempts
        ValueError: If a filename cannot be created (e.g., due to permissions or an invalid name detected by the OS)
    """
    input_dir = os.path.dirname(input_filename)
    base_name, _ = os.path.splitext(os.path.basename(input_filename))
    base_output = base_name + " analysis"

    candidates = [os.path.join(input_dir, base_output + ".json")]
    candidates.extend(
        os.path.join(input_dir, f"{base_output} ({i}).json")
        for i in range(1, MAX_FILENAME_ATTEMPTS + 1)
    )

    for candidate in candidates:
        try:
            with open(candidate, "x"):
                pass
            return candidate
        except FileExistsError:
            continue
        except OSError as e:
            logger.error(f"Cannot create file {candidate}: {e}")
            raise ValueError(f"Cannot create file: {e}")

    logger.error(
        f"Could not find an available filename after {MAX_FILENAME_ATTEMPTS} attempts. "
        f"Please clean up your output directory or specify --output explicitly."
    )
    raise RuntimeError(
        f"No available filename found after {MAX_FILENAME_ATTEMPTS} attempts"
    )


def result_to_json(result: AnalysisResult) -> str:
    """Serialize a result as pretty-printed JSON."""
    return json.dumps(result_to_dict(result), indent=2)


def save_result(result: AnalysisResult, filename: str) -> None:
    """
    Write a result to ``filename`` as pretty-printed JSON.

    Raises:
        OSError: If the file cannot be written
    """
    with open(filename, "w", encoding="utf-8") as f:
        f.write(result_to_json(result))
        f.write("\n")
    logger.debug(f"Saved analysis result to {filename}")
