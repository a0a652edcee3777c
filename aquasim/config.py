"""
Tunable model parameters.

One frozen dataclass per system, each a flat numeric record whose defaults
are the calibrated values. TunableConfig aggregates them; every system
accepts its own record and falls back to the defaults, so the engine runs
parameter-free. Overrides can be loaded from YAML via loader.load_tunables.
"""

from dataclasses import dataclass, field, fields
from typing import Dict


# ============================================================================
# Environment Systems
# ============================================================================

@dataclass(frozen=True)
class DecayConfig:
    q10: float = 2.0  # Rate multiplier per 10 degC
    reference_temp: float = 25.0  # degC
    base_decay_rate: float = 0.05  # Fraction of food per hour at reference temp
    waste_conversion_ratio: float = 0.4  # Fraction of decayed food that becomes waste
    gas_exchange_per_gram_decay: float = 250.0  # mg O2 consumed / CO2 produced per g oxidized


def _default_lid_multipliers() -> Dict[str, float]:
    return {'none': 1.0, 'mesh': 0.75, 'full': 0.25, 'sealed': 0.0}


@dataclass(frozen=True)
class EvaporationConfig:
    base_rate_per_day: float = 0.01  # Fraction of water per day at zero temp difference
    temp_doubling_interval: float = 5.56  # degC of water/room difference that doubles the rate
    lid_multipliers: Dict[str, float] = field(default_factory=_default_lid_multipliers)


@dataclass(frozen=True)
class TemperatureConfig:
    cooling_coefficient: float = 0.132  # Fraction of temp gap closed per hour at reference volume
    reference_volume: float = 100.0  # liters
    volume_exponent: float = 1.0 / 3.0


@dataclass(frozen=True)
class GasExchangeConfig:
    atmospheric_co2: float = 4.0  # mg/L CO2 equilibrium
    o2_saturation_base: float = 10.08  # mg/L at reference temp
    o2_saturation_slope: float = -0.17  # mg/L per degC
    o2_reference_temp: float = 15.0
    o2_saturation_floor: float = 4.0
    base_exchange_rate: float = 0.25  # Fraction of gap closed per hour at optimal flow
    optimal_flow_turnover: float = 10.0  # Tank turnovers per hour for full exchange
    aeration_exchange_multiplier: float = 3.0
    aeration_direct_o2: float = 0.05  # mg/L per hour from bubbles
    aeration_co2_offgas_multiplier: float = 1.5


@dataclass(frozen=True)
class NitrogenCycleConfig:
    waste_conversion_rate: float = 0.3  # Fraction of waste mineralized per hour
    waste_to_ammonia_ratio: float = 50.0  # mg ammonia per g waste
    bacteria_processing_rate: float = 0.0002  # ppm processed per bacteria unit per hour
    aob_spawn_threshold: float = 0.02  # ppm ammonia
    nob_spawn_threshold: float = 0.125  # ppm nitrite
    spawn_amount: float = 10.0  # bacteria units
    aob_growth_rate: float = 0.04
    nob_growth_rate: float = 0.03
    bacteria_per_cm2: float = 0.01  # Carrying capacity per cm^2 of surface
    bacteria_death_rate: float = 0.02
    aob_food_threshold: float = 0.001  # ppm ammonia to sustain AOB
    nob_food_threshold: float = 0.001  # ppm nitrite to sustain NOB


@dataclass(frozen=True)
class AlgaeConfig:
    max_growth_rate: float = 4.0  # Per hour at light saturation
    half_saturation: float = 1.3  # W/L for half of max growth
    algae_cap: float = 100.0


@dataclass(frozen=True)
class PhConfig:
    calcite_target_ph: float = 8.0
    driftwood_target_ph: float = 6.0
    neutral_ph: float = 7.0
    base_drift_rate: float = 0.08  # Fraction of gap closed per hour
    co2_ph_coefficient: float = -0.05  # pH per mg/L CO2 above neutral level
    co2_neutral_level: float = 4.0
    hardscape_diminishing_factor: float = 0.7


# ============================================================================
# Biology Systems
# ============================================================================

@dataclass(frozen=True)
class PlantsConfig:
    base_photosynthesis_rate: float = 1.0
    optimal_co2: float = 20.0  # mg/L
    optimal_nitrate: float = 10.0  # ppm
    o2_per_photosynthesis: float = 0.7  # mg/L
    co2_per_photosynthesis: float = 0.5  # mg/L
    nitrate_per_photosynthesis: float = 0.02  # mg/L (scaled by volume to mass)
    biomass_per_photosynthesis: float = 1.0
    base_respiration_rate: float = 0.15
    o2_per_respiration: float = 0.7
    co2_per_respiration: float = 0.5
    respiration_q10: float = 2.0
    respiration_reference_temp: float = 25.0
    size_per_biomass: float = 0.15
    overgrowth_penalty_scale: float = 200.0
    waste_per_excess_size: float = 0.01
    competition_scale: float = 200.0  # Total plant size that halves algae growth


@dataclass(frozen=True)
class FertilizerFormula:
    """Nutrient mass (mg) delivered per ml of fertilizer"""
    nitrate: float = 50.0
    phosphate: float = 5.0
    potassium: float = 40.0
    iron: float = 1.0

    def total(self) -> float:
        return self.nitrate + self.phosphate + self.potassium + self.iron

    def ratio(self, nutrient: str) -> float:
        """Share of one nutrient in the formula, 0 for an empty formula"""
        total = self.total()
        if total == 0:
            return 0.0
        return getattr(self, nutrient) / total


@dataclass(frozen=True)
class NutrientsConfig:
    optimal_nitrate_ppm: float = 15.0
    optimal_phosphate_ppm: float = 1.0
    optimal_potassium_ppm: float = 10.0
    optimal_iron_ppm: float = 0.2
    low_demand_multiplier: float = 0.3
    medium_demand_multiplier: float = 0.6
    high_demand_multiplier: float = 1.0
    thriving_threshold: float = 0.8
    adequate_threshold: float = 0.5
    struggling_threshold: float = 0.2
    condition_recovery_rate: float = 3.0
    condition_decay_rate: float = 2.0
    adequate_recovery_factor: float = 0.3
    struggling_decay_factor: float = 0.5
    shedding_condition_threshold: float = 30.0
    max_shedding_rate: float = 0.02  # Fraction of size per hour at condition 0
    waste_per_shed_size: float = 0.005  # g per % size shed
    death_condition_threshold: float = 10.0
    death_size_threshold: float = 10.0
    waste_per_plant_death: float = 0.01  # g per % size
    base_consumption_rate: float = 0.1  # mg per hour per 100% plant size
    phosphate_per_decay: float = 50.0
    fertilizer_formula: FertilizerFormula = field(default_factory=FertilizerFormula)


@dataclass(frozen=True)
class LivestockConfig:
    base_food_rate: float = 0.01  # g food per g fish at 100% hunger
    base_respiration_rate: float = 0.02  # mg/L O2 per g fish per hour
    waste_ratio: float = 0.3  # g waste per g food eaten
    respiratory_quotient: float = 0.8  # CO2 produced per O2 consumed
    hunger_increase_rate: float = 0.6  # % per hour
    base_health_recovery: float = 1.0  # health per hour
    temperature_stress_severity: float = 2.0  # per degC outside range
    ph_stress_severity: float = 3.0  # per pH unit outside range
    ammonia_stress_severity: float = 50.0  # per ppm
    nitrite_stress_severity: float = 20.0  # per ppm
    nitrate_stress_severity: float = 0.5  # per ppm above nitrate_stress_threshold
    nitrate_stress_threshold: float = 40.0
    hunger_stress_severity: float = 0.1  # per % above hunger_stress_threshold
    hunger_stress_threshold: float = 50.0
    oxygen_stress_severity: float = 3.0  # per mg/L below oxygen_stress_threshold
    oxygen_stress_threshold: float = 5.0
    water_level_stress_severity: float = 0.2  # per % below water_level_stress_threshold
    water_level_stress_threshold: float = 50.0
    flow_stress_severity: float = 0.01  # per L/h above species max flow
    death_decay_factor: float = 0.5  # g waste per g dead fish
    old_age_death_chance: float = 0.01  # per hour past max age


# ============================================================================
# Aggregate
# ============================================================================

@dataclass(frozen=True)
class TunableConfig:
    """All per-system records in one place"""
    decay: DecayConfig = field(default_factory=DecayConfig)
    evaporation: EvaporationConfig = field(default_factory=EvaporationConfig)
    temperature: TemperatureConfig = field(default_factory=TemperatureConfig)
    gas_exchange: GasExchangeConfig = field(default_factory=GasExchangeConfig)
    nitrogen_cycle: NitrogenCycleConfig = field(default_factory=NitrogenCycleConfig)
    algae: AlgaeConfig = field(default_factory=AlgaeConfig)
    ph: PhConfig = field(default_factory=PhConfig)
    plants: PlantsConfig = field(default_factory=PlantsConfig)
    nutrients: NutrientsConfig = field(default_factory=NutrientsConfig)
    livestock: LivestockConfig = field(default_factory=LivestockConfig)

    @classmethod
    def from_dict(cls, data: dict) -> 'TunableConfig':
        """
        Build from a {section: {key: value}} mapping.

        Missing sections and keys keep their defaults. Unknown names raise
        TypeError from the dataclass constructor.
        """
        sections = {}
        section_types = {f.name: f.default_factory for f in fields(cls)}
        for name, values in (data or {}).items():
            if name not in section_types:
                raise TypeError(f"Unknown config section: {name}")
            values = dict(values or {})
            if name == 'nutrients' and 'fertilizer_formula' in values:
                values['fertilizer_formula'] = FertilizerFormula(**values['fertilizer_formula'])
            if name == 'evaporation' and 'lid_multipliers' in values:
                values['lid_multipliers'] = {
                    **_default_lid_multipliers(), **values['lid_multipliers']
                }
            sections[name] = section_types[name](**values)
        return cls(**sections)


DEFAULT_TUNABLES = TunableConfig()
