"""Input descriptor (SDC) reader.

Reads the JSON file that names the profit center to fetch and which
resources to request. Date fields are converted to the SAP "/Date(<ms>)/"
format on load.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from connectors.sap.sap_models import SDC


class SAPInputError(ValueError):
    """Input descriptor is missing or invalid."""
    pass


class FileReader:
    """Loads SDC input descriptors from disk."""

    def read_sdc(self, path: Union[str, Path]) -> SDC:
        """Read and validate an input descriptor.

        Raises:
            SAPInputError: File missing, not JSON, or missing required fields
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise SAPInputError(f"Input file not found: {path}")
        except (OSError, ValueError) as e:
            raise SAPInputError(f"Failed to read input file {path}: {e}")

        try:
            return SDC.model_validate(data)
        except ValidationError as e:
            raise SAPInputError(f"Invalid input file {path}: {e}")
