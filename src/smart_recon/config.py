"""Configuration loader and validation for reconciliation settings."""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .utils.exceptions import ConfigurationError, InvalidConfigurationError

logger = logging.getLogger(__name__)

# Combination counts grow quickly past this group size
RECOMMENDED_MAX_GROUP_SIZE = 8


class InputConfig(BaseModel):
    """Configuration for CSV input parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_formats: list[str] = Field(
        default_factory=lambda: ["%Y-%m-%d", "%d/%m/%Y", "%Y/%m/%d", "%d-%m-%Y"]
    )
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "id",
            "date": "date",
            "description": "description",
            "amount": "amount",
            "type": "type",
        }
    )
    skip_invalid_rows: bool = False


class NormalizationConfig(BaseModel):
    """Configuration for sign and category inference."""

    debit_types: list[str] = Field(
        default_factory=lambda: ["debit", "dr", "withdrawal", "payment", "purchase"]
    )
    credit_types: list[str] = Field(
        default_factory=lambda: ["credit", "cr", "deposit", "refund", "receipt"]
    )
    category_keywords: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "Bank Fees": ["fee", "charge", "interest"],
            "Payroll": ["salary", "payroll", "wages"],
            "Utilities": ["electricity", "water", "telkom", "internet"],
            "Fuel": ["fuel", "petrol", "engen", "shell", "sasol"],
            "Meals": ["coffee", "restaurant", "cafe", "food"],
            "Sales": ["invoice", "customer", "sale"],
        }
    )
    default_category: str = "Uncategorised"


class EngineConfig(BaseModel):
    """Tolerances for the matching and aggregation engine."""

    model_config = ConfigDict(frozen=True)

    date_tolerance_days: int = 3
    description_threshold: float = 0.8
    amount_tolerance: Decimal = Decimal("0.01")
    aggregation_amount_tolerance: Decimal = Decimal("5")
    aggregation_max_group_size: int = 5


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Matched Transactions")
    )
    aggregated: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Aggregations")
    )
    unmatched_statements: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Statements")
    )
    unmatched_ledger: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Ledger")
    )
    audit_trail: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Audit Trail"))


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)
    currency_symbol: str = "R"


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def validate_engine_config(config: EngineConfig) -> None:
    """
    Check engine tolerances against their allowed ranges.

    Args:
        config: Engine configuration to check

    Raises:
        InvalidConfigurationError: If any value is out of range
    """
    problems: list[str] = []

    if config.date_tolerance_days < 0:
        problems.append(
            f"date_tolerance_days must be >= 0, got {config.date_tolerance_days}"
        )
    if not 0.0 <= config.description_threshold <= 1.0:
        problems.append(
            "description_threshold must be between 0 and 1, "
            f"got {config.description_threshold}"
        )
    if not config.amount_tolerance.is_finite() or config.amount_tolerance < 0:
        problems.append(
            f"amount_tolerance must be >= 0, got {config.amount_tolerance}"
        )
    if (
        not config.aggregation_amount_tolerance.is_finite()
        or config.aggregation_amount_tolerance < 0
    ):
        problems.append(
            "aggregation_amount_tolerance must be >= 0, "
            f"got {config.aggregation_amount_tolerance}"
        )
    if config.aggregation_max_group_size < 1:
        problems.append(
            "aggregation_max_group_size must be >= 1, "
            f"got {config.aggregation_max_group_size}"
        )

    if problems:
        raise InvalidConfigurationError("; ".join(problems))

    if config.aggregation_max_group_size > RECOMMENDED_MAX_GROUP_SIZE:
        logger.warning(
            f"aggregation_max_group_size={config.aggregation_max_group_size} "
            f"exceeds {RECOMMENDED_MAX_GROUP_SIZE}; aggregation search may be slow"
        )


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return ReconConfig().model_dump(mode="json", exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {config_path}"
            )

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Smart Reconciliation Configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
