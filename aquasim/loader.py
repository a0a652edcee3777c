"""
YAML data loader with schema validation.

Loads plant and fish species tables and tunable overrides from YAML files
and validates them against JSON schemas. Species tables are built once per
process and shared as read-only mappings.
"""

import yaml
import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional
import jsonschema

from .config import TunableConfig
from .data_types import FishSpecies, PlantSpecies

DATA_ROOT = Path(__file__).parent / "data"
SCHEMA_DIR = DATA_ROOT / "schemas"


class DataLoadError(Exception):
    """Raised when data loading or validation fails"""
    pass


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise DataLoadError(f"YAML parse error in {file_path}: {e}")


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema"""
    if not schema_path.exists():
        raise DataLoadError(f"Schema not found: {schema_path}")

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise DataLoadError(f"Validation error in {data_path}: {e.message}")
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON schema {schema_path}: {e}")


def load_plant_species(file_path: Path, schema_dir: Optional[Path] = SCHEMA_DIR) -> Mapping[str, PlantSpecies]:
    """Load plant species table from YAML"""
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "plant_species.schema.json", file_path)

    registry = {}
    for plant_data in data['plants']:
        species = PlantSpecies(**plant_data)
        if species.species_id in registry:
            raise DataLoadError(f"Duplicate plant species '{species.species_id}' in {file_path}")
        registry[species.species_id] = species

    return MappingProxyType(registry)


def load_fish_species(file_path: Path, schema_dir: Optional[Path] = SCHEMA_DIR) -> Mapping[str, FishSpecies]:
    """Load fish species table from YAML"""
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "fish_species.schema.json", file_path)

    registry = {}
    for fish_data in data['fish']:
        fish_data = dict(fish_data)
        fish_data['temperature_range'] = tuple(fish_data['temperature_range'])
        fish_data['ph_range'] = tuple(fish_data['ph_range'])
        species = FishSpecies(**fish_data)

        if species.temperature_range[0] > species.temperature_range[1]:
            raise DataLoadError(f"Inverted temperature_range for '{species.species_id}' in {file_path}")
        if species.ph_range[0] > species.ph_range[1]:
            raise DataLoadError(f"Inverted ph_range for '{species.species_id}' in {file_path}")
        if species.species_id in registry:
            raise DataLoadError(f"Duplicate fish species '{species.species_id}' in {file_path}")
        registry[species.species_id] = species

    return MappingProxyType(registry)


def load_tunables(file_path: Path, schema_dir: Optional[Path] = SCHEMA_DIR) -> TunableConfig:
    """
    Load tunable overrides from YAML.

    Args:
        file_path: YAML file of {section: {key: value}}
        schema_dir: Directory holding tunables.schema.json (None skips validation)

    Returns:
        TunableConfig with overrides applied on top of defaults
    """
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "tunables.schema.json", file_path)

    try:
        return TunableConfig.from_dict(data)
    except TypeError as e:
        raise DataLoadError(f"Unknown tunable in {file_path}: {e}")


@lru_cache(maxsize=None)
def plant_species_table() -> Mapping[str, PlantSpecies]:
    """Bundled plant species, loaded once"""
    return load_plant_species(DATA_ROOT / "species" / "plants.yaml")


@lru_cache(maxsize=None)
def fish_species_table() -> Mapping[str, FishSpecies]:
    """Bundled fish species, loaded once"""
    return load_fish_species(DATA_ROOT / "species" / "fish.yaml")


def get_plant_species(species_id: str) -> PlantSpecies:
    """Look up bundled plant species, raising KeyError for unknown ids"""
    return plant_species_table()[species_id]


def get_fish_species(species_id: str) -> FishSpecies:
    """Look up bundled fish species, raising KeyError for unknown ids"""
    return fish_species_table()[species_id]
