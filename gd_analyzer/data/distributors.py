"""Distributor reference data for GD Analyzer.

Loads the Brazilian power distributors table and their reference tariff
components (TE, TUSD, TUSDg, TUSDc) from JSON and applies them to
TariffsData. The engine never performs this lookup itself: tariffs are
resolved here, before a calculation runs.
"""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional

from gd_analyzer.models.project import TariffsData

logger = logging.getLogger(__name__)

_DEFAULT_DATA_PATH = Path(__file__).resolve().parent.parent / "resources" / "distributors.json"

DEFAULT_TARIFF_KEY = "default"

TARIFF_FIELDS = (
    "energy_tariff",
    "distribution_tariff",
    "generation_distribution_tariff",
    "consumption_distribution_tariff",
)


@dataclass(frozen=True)
class Distributor:
    """A power distribution company.

    Attributes:
        id: Short identifier used in inputs (e.g., "CEMIG").
        name: Company name.
        state: Two-letter state code (UF).
        aneel_code: ANEEL identification code, if known.
        region: Geographic region of Brazil.
    """

    id: str
    name: str
    state: str
    aneel_code: str = ""
    region: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Distributor":
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


class DistributorLibrary:
    """Manages the distributor table and reference tariffs.

    Args:
        data_path: Path to a distributors JSON file. Defaults to the
            bundled resources/distributors.json.

    Raises:
        FileNotFoundError: If data_path does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """

    def __init__(self, data_path: str = ""):
        self.data_path = Path(data_path) if data_path else _DEFAULT_DATA_PATH
        self._distributors: Dict[str, Distributor] = {}
        self._tariffs: Dict[str, Dict[str, float]] = {}
        self.metadata: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        with open(self.data_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for entry in data.get("distributors", []):
            try:
                distributor = Distributor.from_dict(entry)
            except TypeError:
                logger.warning("Skipping malformed distributor entry: %r", entry)
                continue
            self._distributors[distributor.id] = distributor

        self._tariffs = {
            key: {name: float(values[name]) for name in TARIFF_FIELDS if name in values}
            for key, values in data.get("tariffs", {}).items()
        }
        self.metadata = {
            "name": data.get("name", self.data_path.stem),
            "source": data.get("source", ""),
            "version": data.get("version", ""),
            "notes": data.get("notes", ""),
        }
        logger.debug(
            "Loaded %d distributors and %d tariff sets from %s",
            len(self._distributors), len(self._tariffs), self.data_path,
        )

    def get_distributors(self) -> List[Distributor]:
        """Return all distributors sorted by name."""
        return sorted(self._distributors.values(), key=lambda d: d.name.casefold())

    def get_distributor_ids(self) -> List[str]:
        return [d.id for d in self.get_distributors()]

    def get_distributor(self, distributor_id: str) -> Optional[Distributor]:
        """Return the distributor with this id, or None if unknown."""
        return self._distributors.get(distributor_id)

    def get_distributors_by_state(self, state: str) -> List[Distributor]:
        return [d for d in self.get_distributors() if d.state == state.upper()]

    def has_reference_tariffs(self, distributor_id: str) -> bool:
        """True if the distributor has its own tariff entry (no fallback)."""
        return distributor_id in self._tariffs and distributor_id != DEFAULT_TARIFF_KEY

    def get_default_tariffs(self, distributor_id: str) -> Dict[str, float]:
        """Return reference TE/TUSD/TUSDg/TUSDc values for a distributor.

        Falls back to the "default" entry when the distributor has no
        tariffs of its own.

        Raises:
            KeyError: If neither the distributor nor a default entry exists.
        """
        if self.has_reference_tariffs(distributor_id):
            return dict(self._tariffs[distributor_id])
        if DEFAULT_TARIFF_KEY not in self._tariffs:
            raise KeyError(
                f"No tariffs for distributor '{distributor_id}' and no default entry in {self.data_path}"
            )
        logger.warning(
            "No reference tariffs for distributor '%s'; using default values", distributor_id,
        )
        return dict(self._tariffs[DEFAULT_TARIFF_KEY])

    def apply_tariffs(self, tariffs: TariffsData, distributor_id: str) -> TariffsData:
        """Return a copy of tariffs with the distributor's reference components.

        Only the four tariff components are replaced; ICMS and PIS/COFINS
        percentages are kept from the given TariffsData.
        """
        return replace(tariffs, **self.get_default_tariffs(distributor_id))
